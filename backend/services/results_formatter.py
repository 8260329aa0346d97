"""
Data transformation utilities for converting engine results to API format.
"""
from typing import List, Dict, Any
from relink.embeddings import EmbeddingOutcome
from relink.matching import Mapping


def derive_warnings(mapping: Mapping) -> List[str]:
    """
    Generate warning array based on mapping confidence.

    Args:
        mapping: Engine mapping

    Returns:
        List of warning strings
    """
    warnings = []
    band = mapping.confidence_band

    if band == 'medium':
        warnings.append('needs-review')

    if band == 'low':
        warnings.append('low-confidence')

    return warnings


def transform_mapping(mapping: Mapping) -> Dict[str, Any]:
    """
    Convert a single mapping to API format.

    Args:
        mapping: Engine mapping

    Returns:
        Dictionary with oldUrl, newUrl, confidence and derived fields
    """
    return {
        'oldUrl': mapping.source,
        'newUrl': mapping.matched,
        'confidence': mapping.confidence,
        'confidencePercent': round(mapping.confidence * 100, 1),
        'confidenceBand': mapping.confidence_band,
        'warnings': derive_warnings(mapping)
    }


def transform_outcome(outcome: EmbeddingOutcome) -> Dict[str, Any]:
    """
    Convert a batch item outcome to API format.

    Successful items carry the embedding; failed items carry the error and
    a suggested solution.
    """
    if outcome.ok:
        return {
            'url': outcome.input,
            'embedding': [float(v) for v in outcome.embedding]
        }
    return {
        'url': outcome.input,
        'error': outcome.error,
        'solution': outcome.remediation
    }


def calculate_stats(mappings: List[Dict[str, Any]]) -> Dict[str, Any]:
    """
    Calculate aggregate statistics from mappings.

    Args:
        mappings: List of API-formatted mapping dictionaries

    Returns:
        Dictionary with total, high, medium, low counts and average confidence
    """
    total = len(mappings)

    if total == 0:
        return {
            'total': 0,
            'high': 0,
            'medium': 0,
            'low': 0,
            'averageConfidence': 0.0
        }

    high_count = len([m for m in mappings if m['confidenceBand'] == 'high'])
    medium_count = len([m for m in mappings if m['confidenceBand'] == 'medium'])
    low_count = len([m for m in mappings if m['confidenceBand'] == 'low'])

    return {
        'total': total,
        'high': high_count,
        'medium': medium_count,
        'low': low_count,
        'averageConfidence': sum(m['confidence'] for m in mappings) / total
    }


def format_mappings_response(mappings: List[Mapping]) -> Dict[str, Any]:
    """
    Format the complete find-matches response.

    Mapping order is preserved (highest confidence first).
    """
    api_mappings = [transform_mapping(m) for m in mappings]

    return {
        'mappings': api_mappings,
        'stats': calculate_stats(api_mappings)
    }


def format_batch_response(outcomes: List[EmbeddingOutcome]) -> Dict[str, Any]:
    results = [transform_outcome(o) for o in outcomes]
    failed = len([o for o in outcomes if not o.ok])

    return {
        'results': results,
        'summary': {
            'total': len(outcomes),
            'succeeded': len(outcomes) - failed,
            'failed': failed
        }
    }
