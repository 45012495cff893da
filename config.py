"""
Configuration settings for the vocab-srs scheduling core.

Uses Pydantic Settings for environment variable management with .env file support.
Every field can be overridden with a ``VOCAB_SRS_`` prefixed variable, e.g.
``VOCAB_SRS_LOG_LEVEL=DEBUG``.
"""
from __future__ import annotations

from functools import lru_cache
from typing import Any, Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="VOCAB_SRS_",
        case_sensitive=False,
        extra="ignore",
    )

    # ========================================
    # Logging
    # ========================================
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO",
        description="Logging verbosity level",
    )
    log_file: str | None = Field(
        default=None,
        description="Log file path (None for stderr only)",
    )

    # ========================================
    # FSRS Settings (rich memory model)
    # ========================================
    fsrs_desired_retention: float = Field(
        default=0.9,
        gt=0.0,
        lt=1.0,
        description="Target retention rate for scheduling",
    )
    fsrs_maximum_interval: int = Field(
        default=36500,
        ge=1,
        description="Maximum days between reviews (100 years)",
    )
    fsrs_default_difficulty: float = Field(
        default=5.0,
        description="Difficulty assumed for items with no history (1-10)",
    )

    # ========================================
    # Rating thresholds (response latency)
    # ========================================
    rating_easy_threshold_ms: int = Field(
        default=2000,
        description="Correct answers faster than this are rated Easy",
    )
    rating_good_threshold_ms: int = Field(
        default=5000,
        description="Correct answers faster than this are rated Good, slower ones Hard",
    )

    # ========================================
    # Session composition
    # ========================================
    session_size_default: int = Field(
        default=25,
        description="Session size used when no preference has been saved",
    )
    session_size_choices: tuple[int, ...] = Field(
        default=(25, 50),
        description="Allowed session sizes",
    )
    session_min_items: int = Field(
        default=3,
        ge=1,
        description="Minimum saved items required before a session can start",
    )
    exercise_cache_ttl_seconds: int = Field(
        default=300,
        description="Lifetime of the (all items, due items) read-through cache",
    )

    # ========================================
    # In-session requeueing
    # ========================================
    requeue_min_offset: int = Field(
        default=2,
        ge=1,
        description="Minimum positions ahead a missed item is re-inserted",
    )
    requeue_max_offset: int = Field(
        default=8,
        ge=1,
        description="Maximum positions ahead a missed item is re-inserted",
    )

    # ========================================
    # CLI
    # ========================================
    words_file: str = Field(
        default="~/.vocab_srs/words.json",
        description="JSON word store used by the terminal practice commands",
    )

    @field_validator("requeue_max_offset")
    @classmethod
    def _max_offset_not_below_min(cls, value: int, info) -> int:
        minimum = info.data.get("requeue_min_offset", 1)
        if value < minimum:
            raise ValueError(
                f"requeue_max_offset ({value}) must be >= requeue_min_offset ({minimum})"
            )
        return value

    # ========================================
    # Helper Methods
    # ========================================
    def get_fsrs_config(self) -> dict[str, Any]:
        """Get rich memory model configuration as a dictionary."""
        return {
            "request_retention": self.fsrs_desired_retention,
            "maximum_interval": self.fsrs_maximum_interval,
            "default_difficulty": self.fsrs_default_difficulty,
            "easy_threshold_ms": self.rating_easy_threshold_ms,
            "good_threshold_ms": self.rating_good_threshold_ms,
        }


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
