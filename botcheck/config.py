"""Engine configuration via environment variables."""

from pydantic_settings import BaseSettings
from functools import lru_cache


class Settings(BaseSettings):
    """Engine settings loaded from environment variables (prefix BOTCHECK_)."""

    # Logging
    DEBUG: bool = False
    LOG_LEVEL: str = "info"

    # Required-field limits
    NAME_MIN_LENGTH: int = 3
    NAME_MAX_LENGTH: int = 50

    # Performance stage
    MAX_MODIFIERS: int = 10
    HIGH_RATING_THRESHOLD: float = 95.0

    # Compatibility stage
    RARITY_MISMATCH_GAP: int = 4

    # Batch validation
    TOP_ISSUE_CODES: int = 10
    BATCH_MAX_WORKERS: int = 1

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8", "env_prefix": "BOTCHECK_"}


@lru_cache
def get_settings() -> Settings:
    return Settings()
