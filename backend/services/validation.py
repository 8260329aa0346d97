"""
Request-shape validation for the mapping API.
"""
import math
from functools import wraps
from typing import Any, Dict, Optional, Tuple
from flask import request, jsonify


def _is_non_empty_string(value: Any) -> bool:
    return isinstance(value, str) and value.strip() != ''


def _is_finite_non_negative(value: Any) -> bool:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    # JSON parsing admits NaN and Infinity
    if isinstance(value, float) and not math.isfinite(value):
        return False
    return value >= 0


def _check_url_list(value: Any, label: str) -> Optional[Tuple[str, str]]:
    if not isinstance(value, list) or len(value) == 0:
        return (
            f"Invalid input: {label} must be a non-empty array",
            f"Please provide an array of {label.lower()} strings."
        )
    return None


def check_url_input(body: Dict[str, Any]) -> Optional[Tuple[str, str]]:
    """
    Validate the fields present in a request body.

    Only fields that are present are checked, so one validator serves every
    endpoint.

    Returns:
        None if valid, otherwise (error, solution).
    """
    text = body.get('text')
    urls = body.get('urls')
    old_urls = body.get('oldUrls')
    new_urls = body.get('newUrls')

    # Single text input
    if 'text' in body and not _is_non_empty_string(text):
        return (
            'Invalid input: Text must be a non-empty string',
            'Please provide a valid text string for embedding.'
        )

    # URL array for batch processing
    if 'urls' in body:
        problem = _check_url_list(urls, 'URLs')
        if problem:
            return problem
        if not all(_is_non_empty_string(url) for url in urls):
            return (
                'Invalid input: Each URL must be a non-empty string',
                'Please ensure all URLs in the array are valid strings.'
            )

    # Old and new URL arrays
    if 'oldUrls' in body or 'newUrls' in body:
        problem = _check_url_list(old_urls, 'Old URLs') or _check_url_list(new_urls, 'New URLs')
        if problem:
            return problem
        if not all(_is_non_empty_string(url) for url in old_urls + new_urls):
            return (
                'Invalid input: Each URL must be a non-empty string',
                'Please ensure all URLs in both arrays are valid strings.'
            )

    # Batch tuning
    if 'batchSize' in body:
        batch_size = body['batchSize']
        if isinstance(batch_size, bool) or not isinstance(batch_size, int) or batch_size < 1:
            return (
                'Invalid input: batchSize must be a positive integer',
                'Please provide a batchSize of 1 or more.'
            )

    if 'delayMs' in body:
        if not _is_finite_non_negative(body['delayMs']):
            return (
                'Invalid input: delayMs must be a finite, non-negative number',
                'Please provide a delayMs of 0 or more.'
            )

    return None


def validate_url_input(*required_fields: str):
    """
    Decorator factory that rejects malformed JSON bodies with a 400.

    Usage:
        @blueprint.route('/batch-process', methods=['POST'])
        @validate_url_input('urls')
        def batch_process():
            body = request.get_json()
    """
    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            body = request.get_json(silent=True)

            if not isinstance(body, dict):
                return jsonify({
                    "error": "Invalid input: Request body must be a JSON object",
                    "solution": "Send a JSON body with Content-Type: application/json."
                }), 400

            missing = [field for field in required_fields if field not in body]
            if missing:
                return jsonify({
                    "error": f"Invalid input: Missing required field(s): {', '.join(missing)}",
                    "solution": "Please include every required field in the request body."
                }), 400

            problem = check_url_input(body)
            if problem:
                error, solution = problem
                return jsonify({
                    "error": error,
                    "solution": solution
                }), 400

            return f(*args, **kwargs)

        return decorated_function

    return decorator
