from __future__ import annotations

import logging
from typing import List, Optional, Sequence

from .config import Config
from .embeddings import EmbeddingOutcome, RetryPolicy, acquire_embeddings, embed_with_retry
from .errors import EmbeddingAcquisitionError, PermanentInputError
from .matching import Mapping, match_embeddings
from .providers import EmbeddingProvider
from .vectors import EmbeddingVector

logger = logging.getLogger(__name__)


class MappingEngine:
    def __init__(
        self,
        provider: EmbeddingProvider,
        batch_size: Optional[int] = None,
        delay_ms: Optional[float] = None,
        retry_policy: Optional[RetryPolicy] = None,
        pacing_divisor: Optional[int] = None,
    ):
        """
        Initialize the engine.

        Args:
            provider: Embedding provider. Its lifecycle belongs to the caller.
            batch_size: Default batch size (Config.BATCH_SIZE if None).
            delay_ms: Default pacing budget in ms (Config.DELAY_MS if None).
            retry_policy: Retry policy (built from Config if None).
            pacing_divisor: Divisor for the pacing delay (Config.PACING_DIVISOR if None).
        """
        self.provider = provider
        self.batch_size = Config.BATCH_SIZE if batch_size is None else batch_size
        self.delay_ms = Config.DELAY_MS if delay_ms is None else delay_ms
        self.retry_policy = retry_policy or RetryPolicy.from_config()
        self.pacing_divisor = Config.PACING_DIVISOR if pacing_divisor is None else pacing_divisor

    async def embed_text(self, text: str) -> EmbeddingVector:
        """
        Embed a single text with retries.

        Raises:
            PermanentInputError: If text is empty.
            TransientProviderError: If every attempt failed.
        """
        if not isinstance(text, str) or not text.strip():
            raise PermanentInputError("Text must be a non-empty string")
        embedding, _ = await embed_with_retry(self.provider, text, self.retry_policy)
        return embedding

    async def acquire_embeddings(
        self,
        inputs: Sequence[str],
        batch_size: Optional[int] = None,
        delay_ms: Optional[float] = None,
    ) -> List[EmbeddingOutcome]:
        """
        Embed inputs in paced batches. Per-item failures are reported in the
        returned outcomes rather than raised.
        """
        return await acquire_embeddings(
            self.provider,
            inputs,
            batch_size=self.batch_size if batch_size is None else batch_size,
            delay_ms=self.delay_ms if delay_ms is None else delay_ms,
            policy=self.retry_policy,
            pacing_divisor=self.pacing_divisor,
        )

    async def match_best_urls(
        self,
        source_texts: Sequence[str],
        target_texts: Sequence[str],
    ) -> List[Mapping]:
        """
        Map every source (old) URL to its most similar target (new) URL.

        Returns:
            One Mapping per source URL, highest confidence first.

        Raises:
            PermanentInputError: If either list is empty.
            EmbeddingAcquisitionError: If any URL in either list could not be
                embedded. No partial mapping is returned.
            ConfigurationError: On provider misconfiguration or dimension mismatch.
        """
        if not source_texts:
            raise PermanentInputError("Source URL list must not be empty")
        if not target_texts:
            raise PermanentInputError("Target URL list must not be empty")

        logger.info("Embedding %d old URLs", len(source_texts))
        source_outcomes = await self.acquire_embeddings(source_texts)
        logger.info("Embedding %d new URLs", len(target_texts))
        target_outcomes = await self.acquire_embeddings(target_texts)

        failures = [o for o in source_outcomes + target_outcomes if not o.ok]
        if failures:
            raise EmbeddingAcquisitionError(
                f"Could not embed {len(failures)} URL(s): "
                + ", ".join(repr(o.input) for o in failures),
                failures=failures,
            )

        mappings = match_embeddings(
            source_urls=[o.input for o in source_outcomes],
            source_embeddings=[o.embedding for o in source_outcomes],
            target_urls=[o.input for o in target_outcomes],
            target_embeddings=[o.embedding for o in target_outcomes],
        )
        logger.info("Produced %d mappings", len(mappings))
        return mappings
