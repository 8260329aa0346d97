import asyncio
import logging
from typing import Awaitable, Callable, List, Optional, TypeVar
from relink.config import Config
from relink.embeddings import EmbeddingOutcome
from relink.engine import MappingEngine
from relink.matching import Mapping
from relink.providers import EmbeddingProvider, create_provider
from relink.vectors import EmbeddingVector

logger = logging.getLogger(__name__)

T = TypeVar("T")

ProviderFactory = Callable[[], EmbeddingProvider]


def default_provider_factory() -> EmbeddingProvider:
    """
    Build the provider named by Config.EMBEDDING_PROVIDER.

    Raises:
        ConfigurationError: If the provider is unknown or misconfigured.
    """
    Config.validate_embeddings()
    return create_provider()


def run_with_engine(
    work: Callable[[MappingEngine], Awaitable[T]],
    provider_factory: Optional[ProviderFactory] = None,
    timeout_seconds: Optional[float] = None,
    **engine_kwargs
) -> T:
    """
    Run one request's worth of engine work on a fresh event loop.

    Numeric settings are range-checked first, so a bad environment surfaces
    as a ConfigurationError rather than an input error. The provider is
    created for this request and closed afterwards. If the work exceeds the
    timeout it is cancelled and asyncio.TimeoutError is raised; nothing
    partial is returned.

    Args:
        work: Coroutine function receiving the engine.
        provider_factory: Builds the provider (default from Config).
        timeout_seconds: Deadline (Config.REQUEST_TIMEOUT_SECONDS if None).
        **engine_kwargs: Passed to MappingEngine (batch_size, delay_ms, ...).
    """
    Config.validate()
    factory = provider_factory or default_provider_factory
    timeout = Config.REQUEST_TIMEOUT_SECONDS if timeout_seconds is None else timeout_seconds

    async def _run_async():
        provider = factory()
        try:
            engine = MappingEngine(provider, **engine_kwargs)
            return await asyncio.wait_for(work(engine), timeout=timeout)
        finally:
            await provider.aclose()

    return asyncio.run(_run_async())


def embed_text(text: str, provider_factory: Optional[ProviderFactory] = None) -> EmbeddingVector:
    return run_with_engine(
        lambda engine: engine.embed_text(text),
        provider_factory=provider_factory
    )


def batch_process(
    urls: List[str],
    batch_size: Optional[int] = None,
    delay_ms: Optional[float] = None,
    provider_factory: Optional[ProviderFactory] = None
) -> List[EmbeddingOutcome]:
    return run_with_engine(
        lambda engine: engine.acquire_embeddings(urls, batch_size=batch_size, delay_ms=delay_ms),
        provider_factory=provider_factory
    )


def find_matches(
    old_urls: List[str],
    new_urls: List[str],
    provider_factory: Optional[ProviderFactory] = None
) -> List[Mapping]:
    logger.info("Finding matches for %d old URLs against %d new URLs", len(old_urls), len(new_urls))
    return run_with_engine(
        lambda engine: engine.match_best_urls(old_urls, new_urls),
        provider_factory=provider_factory
    )
