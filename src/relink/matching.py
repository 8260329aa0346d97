from __future__ import annotations

from dataclasses import dataclass
from operator import attrgetter
from typing import List, Optional, Sequence, Tuple

from .config import Config
from .errors import ConfigurationError, PermanentInputError
from .vectors import EmbeddingMatrix, VectorLike, as_matrix, cosine_similarity

# (target_index, similarity)
MatchCandidate = Tuple[int, float]


def calculate_confidence_band(
    score: float,
    high_threshold: Optional[float] = None,
    medium_threshold: Optional[float] = None,
) -> str:
    """
    Map a confidence score to "high", "medium" or "low".
    """
    high = Config.HIGH_CONFIDENCE_THRESHOLD if high_threshold is None else high_threshold
    medium = Config.MEDIUM_CONFIDENCE_THRESHOLD if medium_threshold is None else medium_threshold
    if score >= high:
        return "high"
    elif score >= medium:
        return "medium"
    else:
        return "low"


@dataclass(frozen=True)
class Mapping:
    """
    Best match for one source (old) URL.

    confidence is the cosine similarity of the pair, in [-1, 1] (~0..1 in practice).
    """
    source: str
    matched: str
    confidence: float

    @property
    def confidence_band(self) -> str:
        return calculate_confidence_band(self.confidence)

    def __repr__(self) -> str:
        return f"Mapping({self.source} -> {self.matched}, score={self.confidence:.3f})"


class UrlMatcher:
    """
    Matching on top of precomputed target embeddings.

    Usage:
      - Construct with target urls + embeddings
      - Call best_match for one source vector or match_many for a list
    """

    def __init__(self, urls: Sequence[str], embeddings: Sequence[VectorLike]) -> None:
        """
        urls: list of target URLs (length M)
        embeddings: M vectors of one shared dimensionality

        Raises:
            PermanentInputError: If there are no targets or the counts differ.
            ConfigurationError: If the embeddings differ in dimensionality.
        """
        if len(urls) == 0:
            raise PermanentInputError("Target list must not be empty")
        if len(urls) != len(embeddings):
            raise PermanentInputError(
                f"urls and embeddings size mismatch: {len(urls)} != {len(embeddings)}"
            )
        self.urls: List[str] = list(urls)
        self.embeddings: EmbeddingMatrix = as_matrix(embeddings)

    @property
    def dimension(self) -> int:
        return int(self.embeddings.shape[1])

    def best_match(self, embedding: VectorLike) -> MatchCandidate:
        """
        Scan every target left to right and return (index, similarity) of the best.
        An equal score never displaces an earlier candidate.
        """
        best_idx = 0
        best_sim = cosine_similarity(embedding, self.embeddings[0])

        for j in range(1, len(self.urls)):
            sim = cosine_similarity(embedding, self.embeddings[j])
            if sim > best_sim:
                best_idx = j
                best_sim = sim

        return best_idx, best_sim

    def match_many(self, urls: Sequence[str], embeddings: Sequence[VectorLike]) -> List[Mapping]:
        """
        Match every source URL to its best target.

        Returns mappings sorted by confidence, highest first. The sort is
        stable: sources with equal confidence keep their input order.
        """
        if len(urls) == 0:
            raise PermanentInputError("Source list must not be empty")
        if len(urls) != len(embeddings):
            raise PermanentInputError(
                f"urls and embeddings size mismatch: {len(urls)} != {len(embeddings)}"
            )

        # Validates the source dimensionality as a whole before scanning
        sources: EmbeddingMatrix = as_matrix(embeddings)
        if sources.shape[1] != self.dimension:
            raise ConfigurationError(
                f"Embedding dimensionality mismatch: source {sources.shape[1]} != target {self.dimension}"
            )

        mappings: List[Mapping] = []
        for url, vec in zip(urls, sources):
            best_idx, best_sim = self.best_match(vec)
            mappings.append(
                Mapping(
                    source=url,                    # Old URL
                    matched=self.urls[best_idx],   # Best matching new URL
                    confidence=best_sim,
                )
            )

        return sorted(mappings, key=attrgetter("confidence"), reverse=True)


def match_embeddings(
    source_urls: Sequence[str],
    source_embeddings: Sequence[VectorLike],
    target_urls: Sequence[str],
    target_embeddings: Sequence[VectorLike],
) -> List[Mapping]:
    """
    One-to-best mapping from source URLs to target URLs, highest confidence first.
    """
    if len(source_urls) == 0:
        raise PermanentInputError("Source list must not be empty")
    matcher = UrlMatcher(target_urls, target_embeddings)
    return matcher.match_many(source_urls, source_embeddings)
