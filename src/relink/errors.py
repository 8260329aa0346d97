"""
Error taxonomy shared by the acquirer, the matcher and the HTTP layer.
"""
from typing import List, Optional


class RelinkError(Exception):
    """Base class for all errors raised by the mapping engine."""


class PermanentInputError(RelinkError):
    """
    The input itself is unusable (empty string, empty list, mismatched sizes).
    Caller's fault; never retried.
    """


class TransientProviderError(RelinkError):
    """
    The embedding provider failed in a way that may succeed on retry
    (network blip, rate limit, 5xx).
    """


class ConfigurationError(RelinkError):
    """
    Missing/invalid provider credentials or an embedding dimensionality
    mismatch. Aborts the whole operation.
    """


class EmbeddingAcquisitionError(RelinkError):
    """
    Raised by matching when one or more inputs could not be embedded.

    Args:
        message: Summary of the failure.
        failures: The failed per-item outcomes.
    """

    def __init__(self, message: str, failures: Optional[List] = None):
        super().__init__(message)
        self.failures = failures or []
