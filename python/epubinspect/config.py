"""Inspector settings loaded from environment variables.

Environment Configuration:
    EPUB_ENV: Deployment environment (local | test | staging | prod)

Pagination Configuration:
    EPUB_BYTES_PER_PAGE: Compressed bytes per estimated page (default 1024)
    EPUB_BYTES_PER_POSITION: Uncompressed bytes per synthetic position (default 1024)

Logging Configuration:
    EPUB_LOG_JSON: Render logs as JSON or console-friendly text (default: JSON
        everywhere except EPUB_ENV=local)
    EPUB_LOG_LEVEL: Root log level name (default INFO)
"""

import logging
from enum import Enum
from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings


class Environment(str, Enum):
    """Valid deployment environments."""

    LOCAL = "local"
    TEST = "test"
    STAGING = "staging"
    PROD = "prod"


class Settings(BaseSettings):
    """Inspector configuration.

    Validation rules:
    - EPUB_BYTES_PER_PAGE and EPUB_BYTES_PER_POSITION must be >= 1
    - EPUB_LOG_LEVEL must be a stdlib logging level name
    """

    epub_env: Environment = Field(default=Environment.LOCAL, alias="EPUB_ENV")

    # Virtual pagination divisors (1KB-per-page convention)
    bytes_per_page: int = Field(default=1024, alias="EPUB_BYTES_PER_PAGE")
    bytes_per_position: int = Field(default=1024, alias="EPUB_BYTES_PER_POSITION")

    log_json: bool | None = Field(default=None, alias="EPUB_LOG_JSON")
    log_level: str = Field(default="INFO", alias="EPUB_LOG_LEVEL")

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
        "populate_by_name": True,
    }

    @field_validator("bytes_per_page", "bytes_per_position")
    @classmethod
    def validate_divisor(cls, value: int, info) -> int:
        """Divisors must be >= 1."""
        if value < 1:
            env_name = cls.model_fields[info.field_name].alias
            raise ValueError(f"{env_name} must be >= 1")
        return value

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, value: str) -> str:
        """Normalize and check the level name."""
        level = value.strip().upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"EPUB_LOG_LEVEL must be a logging level name, got {value!r}")
        return level

    @property
    def json_logs(self) -> bool:
        """Whether logs render as JSON; unset EPUB_LOG_JSON follows EPUB_ENV."""
        if self.log_json is not None:
            return self.log_json
        return self.epub_env != Environment.LOCAL


@lru_cache
def get_settings() -> Settings:
    """Get cached inspector settings.

    Returns:
        Settings instance loaded from environment.

    Raises:
        ValidationError: If settings are invalid.
    """
    return Settings()


def clear_settings_cache() -> None:
    """Clear the settings cache. Useful for testing."""
    get_settings.cache_clear()
