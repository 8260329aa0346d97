"""
Embedding providers.

The engine only depends on the EmbeddingProvider protocol: a single
asynchronous `embed(text)` call that either returns a vector or raises one of
the errors in `relink.errors`. Concrete providers classify their own failures
into that taxonomy so the acquirer can decide what to retry.
"""
from __future__ import annotations

import asyncio
import hashlib
import re
from typing import Optional, Protocol, runtime_checkable
import numpy as np
import openai
from openai import AsyncOpenAI

from .config import Config
from .errors import ConfigurationError, PermanentInputError, TransientProviderError
from .vectors import EmbeddingVector


@runtime_checkable
class EmbeddingProvider(Protocol):
    async def embed(self, text: str) -> EmbeddingVector:
        """Embed a single text."""

    async def aclose(self) -> None:
        """Release any underlying client resources."""


# =========================
# OpenAI Provider
# =========================

class OpenAIEmbeddingProvider:
    """
    Embeds text with the OpenAI embeddings API.
    SDK exceptions are translated into the relink error taxonomy.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        dimension: Optional[int] = None,
        client: Optional[AsyncOpenAI] = None,
    ) -> None:
        resolved_key = api_key or Config.OPENAI_API_KEY
        if client is None and not resolved_key:
            raise ConfigurationError(
                "Missing OPENAI_API_KEY. "
                "Please set this in your .env file to use embedding features."
            )
        self.model: str = model or Config.EMBEDDING_MODEL
        self.dimension: int = dimension or Config.EMBEDDING_DIMENSION
        # Retries are owned by the acquirer, not the SDK
        self.client: AsyncOpenAI = client or AsyncOpenAI(api_key=resolved_key, max_retries=0)

    async def embed(self, text: str) -> EmbeddingVector:
        try:
            resp = await self.client.embeddings.create(
                input=text,
                model=self.model,
                encoding_format="float"
            )
        except openai.APIConnectionError as e:
            # Includes APITimeoutError
            raise TransientProviderError(f"Embedding service unreachable: {e}") from e
        except openai.RateLimitError as e:
            raise TransientProviderError(f"Embedding service rate limit hit: {e}") from e
        except openai.InternalServerError as e:
            raise TransientProviderError(f"Embedding service error: {e}") from e
        except (openai.AuthenticationError, openai.PermissionDeniedError, openai.NotFoundError) as e:
            raise ConfigurationError(f"Embedding service rejected credentials or model: {e}") from e
        except openai.BadRequestError as e:
            raise PermanentInputError(f"Embedding service rejected input: {e}") from e
        except openai.APIStatusError as e:
            if e.status_code >= 500 or e.status_code in (408, 409):
                raise TransientProviderError(f"Embedding service error {e.status_code}: {e}") from e
            raise PermanentInputError(f"Embedding service error {e.status_code}: {e}") from e

        embedding = np.array(resp.data[0].embedding, dtype=np.float32)
        if embedding.shape[0] != self.dimension:
            raise ConfigurationError(
                f"Model {self.model} returned {embedding.shape[0]}-dimensional embeddings, "
                f"expected {self.dimension}. Check EMBEDDING_DIMENSION."
            )
        return embedding

    async def aclose(self) -> None:
        await self.client.close()

    async def __aenter__(self) -> "OpenAIEmbeddingProvider":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()


# =========================
# Mock Provider
# =========================

_TOKEN_RE = re.compile(r"[a-z0-9]+")


class MockEmbeddingProvider:
    """
    Deterministic offline provider.

    Hashes URL tokens and character trigrams into a fixed number of buckets,
    so the same string always gets the same embedding and strings sharing
    path segments point in similar directions.
    """

    def __init__(
        self,
        dimension: Optional[int] = None,
        latency_ms: int = 0,
        token_weight: float = 2.0,
        trigram_weight: float = 1.0,
    ) -> None:
        self.dimension: int = dimension or Config.EMBEDDING_DIMENSION
        self.latency_ms: int = latency_ms
        self.token_weight: float = token_weight
        self.trigram_weight: float = trigram_weight

    async def embed(self, text: str) -> EmbeddingVector:
        if self.latency_ms > 0:
            await asyncio.sleep(self.latency_ms / 1000)
        return self.compute(text)

    def compute(self, text: str) -> EmbeddingVector:
        vec = np.zeros(self.dimension, dtype=np.float64)
        normalized = text.strip().lower()

        for token in _TOKEN_RE.findall(normalized):
            self._add_feature(vec, "tok:" + token, self.token_weight)

        padded = f" {normalized} "
        for i in range(len(padded) - 2):
            self._add_feature(vec, "tri:" + padded[i:i + 3], self.trigram_weight)

        n = np.linalg.norm(vec)
        if n > 0:
            vec = vec / n
        return vec.astype(np.float32)

    def _add_feature(self, vec: np.ndarray, feature: str, weight: float) -> None:
        digest = hashlib.sha256(feature.encode("utf-8")).digest()
        idx = int.from_bytes(digest[:4], "big") % self.dimension
        sign = 1.0 if digest[4] & 1 else -1.0
        vec[idx] += sign * weight

    async def aclose(self) -> None:
        return None


def create_provider(name: Optional[str] = None, **kwargs) -> EmbeddingProvider:
    """
    Build the provider named by `name` (defaults to Config.EMBEDDING_PROVIDER).

    Raises:
        ConfigurationError: If the name is unknown or its credentials are missing.
    """
    name = (name or Config.EMBEDDING_PROVIDER).lower()
    if name == "mock":
        return MockEmbeddingProvider(**kwargs)
    if name == "openai":
        return OpenAIEmbeddingProvider(**kwargs)
    raise ConfigurationError(f"Unsupported embedding provider: {name}")
