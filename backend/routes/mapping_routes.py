from flask import Blueprint, current_app, request, jsonify
from backend.services import engine_runner
from backend.services.results_formatter import format_batch_response, format_mappings_response
from backend.services.validation import validate_url_input

mapping_blueprint = Blueprint("mapping", __name__)


def _provider_factory():
    # Tests and alternate deployments inject their own factory
    return current_app.config.get("PROVIDER_FACTORY")


@mapping_blueprint.route("/embeddings", methods=["POST"])
@validate_url_input("text")
def create_embedding():
    """
    Embed a single text.

    Expects:
        - text: non-empty string

    Returns:
        JSON response with the embedding vector
    """
    body = request.get_json()

    embedding = engine_runner.embed_text(body["text"], provider_factory=_provider_factory())

    return jsonify({
        "embedding": [float(v) for v in embedding]
    }), 200


@mapping_blueprint.route("/batch-process", methods=["POST"])
@validate_url_input("urls")
def batch_process():
    """
    Embed a list of URLs in paced batches.

    Expects:
        - urls: non-empty array of non-empty strings
        - batchSize: optional positive int
        - delayMs: optional non-negative number

    Returns:
        JSON response with one result per URL, in input order. Failed URLs
        carry an error and a suggested solution instead of an embedding.
    """
    body = request.get_json()

    outcomes = engine_runner.batch_process(
        body["urls"],
        batch_size=body.get("batchSize"),
        delay_ms=body.get("delayMs"),
        provider_factory=_provider_factory()
    )

    return jsonify(format_batch_response(outcomes)), 200


@mapping_blueprint.route("/find-matches", methods=["POST"])
@validate_url_input("oldUrls", "newUrls")
def find_matches():
    """
    Map every old URL to its most similar new URL.

    Expects:
        - oldUrls: non-empty array of non-empty strings
        - newUrls: non-empty array of non-empty strings

    Returns:
        JSON response with mappings (highest confidence first) and stats
    """
    body = request.get_json()

    mappings = engine_runner.find_matches(
        body["oldUrls"],
        body["newUrls"],
        provider_factory=_provider_factory()
    )

    return jsonify(format_mappings_response(mappings)), 200
