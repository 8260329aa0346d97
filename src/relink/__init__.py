"""
Relink: maps old site URLs to their closest new URLs using text embeddings.
"""
from .errors import (
    RelinkError,
    PermanentInputError,
    TransientProviderError,
    ConfigurationError,
    EmbeddingAcquisitionError,
)
from .engine import MappingEngine
from .matching import Mapping, UrlMatcher, match_embeddings

__all__ = [
    "RelinkError",
    "PermanentInputError",
    "TransientProviderError",
    "ConfigurationError",
    "EmbeddingAcquisitionError",
    "MappingEngine",
    "Mapping",
    "UrlMatcher",
    "match_embeddings",
]
