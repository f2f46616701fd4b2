"""
Configuration Management for the Household Ledger engine

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All tunables live here. The defaults are the values the
ledger client has always shipped with, so an empty environment reproduces
the deployed behaviour exactly.
"""

from decimal import Decimal
from functools import cached_property, lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class RecommendationSettings(BaseSettings):
    """Scoring knobs for the category recommender."""

    model_config = SettingsConfigDict(
        env_prefix="LEDGER_RECOMMEND_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    min_description_length: int = Field(
        default=2,
        ge=1,
        description="Descriptions shorter than this produce no suggestions"
    )
    suggestion_limit: int = Field(
        default=5,
        ge=1,
        le=50,
        description="Maximum number of suggestions returned"
    )
    admission_threshold: float = Field(
        default=0.3,
        ge=0.0,
        description="A candidate is kept only if its base score is strictly above this"
    )
    word_overlap_weight: float = Field(
        default=0.5,
        description="Multiplier applied to the word-overlap ratio"
    )
    substring_bonus: float = Field(
        default=0.3,
        description="Bonus when one description contains the other"
    )
    frequency_weight_cap: float = Field(
        default=0.2,
        ge=0.0,
        description="Upper bound of the frequency weight"
    )
    # Bands are checked in order; the first matching band wins
    amount_bands: tuple[tuple[Decimal, float], ...] = Field(
        default=((Decimal("0.1"), 0.2), (Decimal("0.5"), 0.1)),
        description="(relative amount difference bound, bonus) pairs"
    )
    recency_bands: tuple[tuple[int, float], ...] = Field(
        default=((30, 0.1), (90, 0.05)),
        description="(days since last use bound, weight) pairs"
    )


class AppSettings(BaseSettings):
    """
    Main engine settings.

    Loads configuration from environment variables and .env file.
    """

    model_config = SettingsConfigDict(
        env_prefix="LEDGER_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    # Environment
    app_environment: str = Field(
        default="development",
        description="Application environment"
    )

    # Validation thresholds
    future_date_tolerance_days: int = Field(
        default=0,
        ge=0,
        description="How many days in the future an entry date can be"
    )
    max_entry_amount_krw: float = Field(
        default=1_000_000_000.0,
        description="Maximum reasonable entry amount (for sanity checking)"
    )

    # Logging
    log_level: str = Field(
        default="INFO",
        description="Minimum level for engine logs"
    )
    log_json: bool = Field(
        default=True,
        description="Render logs as JSON (False gives a console renderer)"
    )

    @field_validator('log_level')
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Only accept the standard logging level names."""
        level = v.strip().upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unsupported log level: {v}")
        return level


class Settings(BaseSettings):
    """
    Root settings container.

    Aggregates all sub-settings for easy access. Each group is read from
    the environment on first access and kept with the cached instance.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    @cached_property
    def app(self) -> AppSettings:
        return AppSettings()

    @cached_property
    def recommendation(self) -> RecommendationSettings:
        return RecommendationSettings()


@lru_cache()
def get_settings() -> Settings:
    """
    Get engine settings (cached).

    Uses LRU cache to ensure settings are only loaded once.
    Call get_settings.cache_clear() to reload if needed.
    """
    return Settings()


def validate_all_settings() -> dict[str, bool]:
    """
    Validate all settings are properly configured.

    Returns a dict of {setting_name: is_valid}.
    Useful for startup checks.
    """
    results = {}

    settings = get_settings()

    try:
        _ = settings.app
        results["app"] = True
    except ValueError as e:
        results["app"] = False
        results["app_error"] = str(e)

    try:
        _ = settings.recommendation
        results["recommendation"] = True
    except ValueError as e:
        results["recommendation"] = False
        results["recommendation_error"] = str(e)

    return results
