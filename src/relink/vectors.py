from __future__ import annotations

from typing import Sequence, Union
import numpy as np
from numpy.typing import NDArray

from .errors import ConfigurationError, PermanentInputError


# Type alias for float embedding matrices/vectors
EmbeddingMatrix = NDArray[np.floating]
EmbeddingVector = NDArray[np.floating]

VectorLike = Union[EmbeddingVector, Sequence[float]]


def as_vector(values: VectorLike) -> EmbeddingVector:
    """
    Convert a sequence of floats into a 1-D float64 array.
    Similarity is computed in float64 even when the provider returns float32.
    """
    vec = np.asarray(values, dtype=np.float64)
    if vec.ndim != 1:
        raise ConfigurationError(f"Embedding must be one-dimensional, got shape {vec.shape}")
    return vec


def as_matrix(vectors: Sequence[VectorLike]) -> EmbeddingMatrix:
    """
    Stack embeddings into an (N, D) matrix.

    Raises:
        PermanentInputError: If no vectors are given.
        ConfigurationError: If the vectors do not share one dimensionality.
    """
    if len(vectors) == 0:
        raise PermanentInputError("Cannot build an embedding matrix from an empty list")

    rows = [as_vector(v) for v in vectors]
    dims = {row.shape[0] for row in rows}
    if len(dims) != 1:
        raise ConfigurationError(
            f"Embedding dimensionality mismatch: found dimensions {sorted(dims)}"
        )
    return np.stack(rows, axis=0)


def check_same_dimension(a: EmbeddingVector, b: EmbeddingVector) -> None:
    if a.shape[0] != b.shape[0]:
        raise ConfigurationError(
            f"Embedding dimensionality mismatch: {a.shape[0]} != {b.shape[0]}"
        )


def dot(a: VectorLike, b: VectorLike) -> float:
    va, vb = as_vector(a), as_vector(b)
    check_same_dimension(va, vb)
    return float(np.dot(va, vb))


def norm(a: VectorLike) -> float:
    return float(np.linalg.norm(as_vector(a)))


def cosine_similarity(a: VectorLike, b: VectorLike) -> float:
    """
    Cosine similarity between two vectors, in [-1, 1].

    A zero-norm vector has no direction, so its similarity to anything is
    defined as 0.0 instead of dividing by zero.

    Raises:
        ConfigurationError: If the vectors differ in dimensionality.
    """
    va, vb = as_vector(a), as_vector(b)
    check_same_dimension(va, vb)

    norm_a = np.linalg.norm(va)
    norm_b = np.linalg.norm(vb)
    if norm_a == 0.0 or norm_b == 0.0:
        return 0.0

    return float(np.dot(va, vb) / (norm_a * norm_b))
