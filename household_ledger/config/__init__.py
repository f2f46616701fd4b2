"""Configuration package."""

from household_ledger.config.settings import (
    AppSettings,
    RecommendationSettings,
    Settings,
    get_settings,
    validate_all_settings,
)

__all__ = [
    "AppSettings",
    "RecommendationSettings",
    "Settings",
    "get_settings",
    "validate_all_settings",
]
