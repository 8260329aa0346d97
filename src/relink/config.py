import os
from dotenv import load_dotenv
from typing import Optional

from .errors import ConfigurationError

# Load environment variables from .env file
load_dotenv()


class Config:
    """
    Configuration management for Relink.
    Loads settings from environment variables with sensible defaults.
    """

    # OpenAI Configuration
    OPENAI_API_KEY: Optional[str] = os.getenv('OPENAI_API_KEY')

    # Embedding Provider
    # 'openai' calls the OpenAI embeddings API, 'mock' is deterministic and offline
    EMBEDDING_PROVIDER: str = os.getenv(
        'EMBEDDING_PROVIDER',
        'openai' if os.getenv('OPENAI_API_KEY') else 'mock'
    ).lower()
    EMBEDDING_MODEL: str = os.getenv('EMBEDDING_MODEL', 'text-embedding-3-small')
    EMBEDDING_DIMENSION: int = int(os.getenv('EMBEDDING_DIMENSION', '1536'))

    # Batch Acquisition
    BATCH_SIZE: int = int(os.getenv('BATCH_SIZE', '5'))
    DELAY_MS: int = int(os.getenv('DELAY_MS', '1000'))
    # Pacing delay between items is DELAY_MS / PACING_DIVISOR
    PACING_DIVISOR: int = int(os.getenv('PACING_DIVISOR', '5'))
    MAX_ATTEMPTS: int = int(os.getenv('MAX_ATTEMPTS', '3'))
    BACKOFF_BASE_MS: int = int(os.getenv('BACKOFF_BASE_MS', '1000'))

    # Matching Thresholds
    # HIGH = 0.85+, MEDIUM = 0.7-0.85, < 0.7 = low
    HIGH_CONFIDENCE_THRESHOLD: float = float(os.getenv('HIGH_CONFIDENCE_THRESHOLD', '0.85'))
    MEDIUM_CONFIDENCE_THRESHOLD: float = float(os.getenv('MEDIUM_CONFIDENCE_THRESHOLD', '0.7'))

    # HTTP Service
    PORT: int = int(os.getenv('PORT', '3000'))
    ENVIRONMENT: str = os.getenv('ENVIRONMENT', 'development')
    REQUEST_TIMEOUT_SECONDS: float = float(os.getenv('REQUEST_TIMEOUT_SECONDS', '120'))
    MAX_CONTENT_LENGTH: int = int(os.getenv('MAX_CONTENT_LENGTH', str(1024 * 1024)))

    @classmethod
    def validate(cls) -> None:
        """
        Validates that numeric settings are within range.

        Raises:
            ConfigurationError: If a setting is out of range.
        """
        problems = []
        if cls.BATCH_SIZE < 1:
            problems.append('BATCH_SIZE must be >= 1')
        if cls.DELAY_MS < 0:
            problems.append('DELAY_MS must be >= 0')
        if cls.PACING_DIVISOR < 1:
            problems.append('PACING_DIVISOR must be >= 1')
        if cls.MAX_ATTEMPTS < 1:
            problems.append('MAX_ATTEMPTS must be >= 1')
        if cls.BACKOFF_BASE_MS < 0:
            problems.append('BACKOFF_BASE_MS must be >= 0')
        if cls.EMBEDDING_DIMENSION < 1:
            problems.append('EMBEDDING_DIMENSION must be >= 1')

        if problems:
            raise ConfigurationError(
                f"Invalid configuration: {'; '.join(problems)}. "
                f"Please fix these in your .env file."
            )

    @classmethod
    def validate_embeddings(cls) -> None:
        """
        Validates that embedding-related configuration is set.

        Raises:
            ConfigurationError: If embedding configuration is missing.
        """
        if cls.EMBEDDING_PROVIDER not in ('openai', 'mock'):
            raise ConfigurationError(
                f"Unsupported EMBEDDING_PROVIDER: {cls.EMBEDDING_PROVIDER}. "
                "Use 'openai' or 'mock'."
            )
        if cls.EMBEDDING_PROVIDER == 'openai' and not cls.OPENAI_API_KEY:
            raise ConfigurationError(
                "Missing OPENAI_API_KEY. "
                "Please set this in your .env file to use embedding features."
            )
