"""
Batched, paced, retrying acquisition of embeddings.

Items are embedded one at a time, batch after batch, so load on the provider
stays bounded and retries are logged in input order. A failure on one item is
recorded against that item and never aborts the rest of the list; only a
ConfigurationError stops the acquisition.
"""
from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import List, Optional, Sequence, TypeVar

from .config import Config
from .errors import ConfigurationError, PermanentInputError, TransientProviderError
from .providers import EmbeddingProvider
from .vectors import EmbeddingVector

logger = logging.getLogger(__name__)

T = TypeVar("T")

PROCESSING_HINT = "This URL could not be processed. Try simplifying or shortening it."
EMPTY_INPUT_HINT = "Provide a non-empty URL or text string."
REJECTED_INPUT_HINT = "The embedding service rejected this input. Check it for unusual characters or excessive length."


@dataclass(frozen=True)
class RetryPolicy:
    """
    max_attempts: total provider calls per item, including the first.
    base_backoff_ms: delay before the second attempt; doubles for each one after.
    """
    max_attempts: int = 3
    base_backoff_ms: float = 1000

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ConfigurationError(f"max_attempts must be >= 1, got {self.max_attempts}")
        if self.base_backoff_ms < 0:
            raise ConfigurationError(f"base_backoff_ms must be >= 0, got {self.base_backoff_ms}")

    def backoff_seconds(self, attempt: int) -> float:
        """Delay to wait after failed attempt number `attempt` (0-based)."""
        return (self.base_backoff_ms * (2 ** attempt)) / 1000

    @classmethod
    def from_config(cls) -> "RetryPolicy":
        return cls(max_attempts=Config.MAX_ATTEMPTS, base_backoff_ms=Config.BACKOFF_BASE_MS)


@dataclass(frozen=True)
class EmbeddingOutcome:
    """
    Result for one input string: either an embedding or an error with a hint.
    """
    input: str
    embedding: Optional[EmbeddingVector] = None
    error: Optional[str] = None
    remediation: Optional[str] = None
    attempts: int = 0

    @property
    def ok(self) -> bool:
        return self.error is None

    def __repr__(self) -> str:
        if self.ok:
            return f"EmbeddingOutcome({self.input!r}, dims={len(self.embedding)}, attempts={self.attempts})"
        return f"EmbeddingOutcome({self.input!r}, error={self.error!r}, attempts={self.attempts})"


def partition_batches(items: Sequence[T], batch_size: int) -> List[List[T]]:
    """
    Split items into consecutive chunks of batch_size; the last may be shorter.
    """
    if batch_size < 1:
        raise PermanentInputError(f"batch_size must be >= 1, got {batch_size}")
    return [list(items[i:i + batch_size]) for i in range(0, len(items), batch_size)]


async def embed_with_retry(
    provider: EmbeddingProvider,
    text: str,
    policy: RetryPolicy,
) -> tuple[EmbeddingVector, int]:
    """
    Call the provider, retrying TransientProviderError with exponential backoff.

    Returns:
        (embedding, attempts used)

    Raises:
        TransientProviderError: When every attempt failed.
        PermanentInputError, ConfigurationError: Immediately, without retry.
    """
    attempt = 0
    while True:
        try:
            embedding = await provider.embed(text)
            return embedding, attempt + 1
        except TransientProviderError as e:
            if attempt + 1 >= policy.max_attempts:
                raise
            delay = policy.backoff_seconds(attempt)
            logger.warning(
                "Transient error embedding %r (attempt %d/%d): %s; retrying in %.2fs",
                text, attempt + 1, policy.max_attempts, e, delay
            )
            await asyncio.sleep(delay)
            attempt += 1


async def acquire_embeddings(
    provider: EmbeddingProvider,
    inputs: Sequence[str],
    batch_size: Optional[int] = None,
    delay_ms: Optional[float] = None,
    policy: Optional[RetryPolicy] = None,
    pacing_divisor: Optional[int] = None,
) -> List[EmbeddingOutcome]:
    """
    Embed every input, in order, one item at a time.

    Args:
        provider: The embedding capability.
        inputs: Non-empty list of strings.
        batch_size: Items per batch (default Config.BATCH_SIZE).
        delay_ms: Pacing budget; the gap between items is delay_ms / pacing_divisor.
        policy: Retry policy (default from Config).
        pacing_divisor: Divisor applied to delay_ms (default Config.PACING_DIVISOR).

    Returns:
        One EmbeddingOutcome per input, in input order.

    Raises:
        PermanentInputError: If inputs is empty.
        ConfigurationError: If the provider is misconfigured.
    """
    if not inputs:
        raise PermanentInputError("inputs must be a non-empty list of strings")

    batch_size = Config.BATCH_SIZE if batch_size is None else batch_size
    delay_ms = Config.DELAY_MS if delay_ms is None else delay_ms
    pacing_divisor = Config.PACING_DIVISOR if pacing_divisor is None else pacing_divisor
    policy = policy or RetryPolicy.from_config()

    if delay_ms < 0:
        raise PermanentInputError(f"delay_ms must be >= 0, got {delay_ms}")
    if pacing_divisor < 1:
        raise PermanentInputError(f"pacing_divisor must be >= 1, got {pacing_divisor}")
    pacing_seconds = (delay_ms / pacing_divisor) / 1000

    batches = partition_batches(list(inputs), batch_size)
    total = len(inputs)
    outcomes: List[EmbeddingOutcome] = []
    processed = 0

    for batch_index, batch in enumerate(batches, start=1):
        logger.info("Processing batch %d/%d (%d items)", batch_index, len(batches), len(batch))

        for text in batch:
            outcomes.append(await _embed_one(provider, text, policy))
            processed += 1

            if processed < total and pacing_seconds > 0:
                await asyncio.sleep(pacing_seconds)

    failed = sum(1 for o in outcomes if not o.ok)
    logger.info("Embedded %d/%d inputs (%d failed)", total - failed, total, failed)
    return outcomes


async def _embed_one(provider: EmbeddingProvider, text: str, policy: RetryPolicy) -> EmbeddingOutcome:
    if not isinstance(text, str) or not text.strip():
        logger.warning("Rejected empty input before dispatch: %r", text)
        return EmbeddingOutcome(
            input=text,
            error="Input must be a non-empty string",
            remediation=EMPTY_INPUT_HINT,
        )

    try:
        embedding, attempts = await embed_with_retry(provider, text, policy)
    except TransientProviderError as e:
        logger.error("Error processing %r after %d attempts: %s", text, policy.max_attempts, e)
        return EmbeddingOutcome(
            input=text,
            error=str(e),
            remediation=PROCESSING_HINT,
            attempts=policy.max_attempts,
        )
    except PermanentInputError as e:
        logger.error("Provider rejected %r: %s", text, e)
        return EmbeddingOutcome(
            input=text,
            error=str(e),
            remediation=REJECTED_INPUT_HINT,
            attempts=1,
        )

    return EmbeddingOutcome(input=text, embedding=embedding, attempts=attempts)
