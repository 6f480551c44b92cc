"""Config module - settings and constants."""

from nysync.config.settings import settings, Settings, ConfigurationError
from nysync.config.constants import (
    NYS_API_BASE_URL,
    NYS_SITE_BASE_URL,
    current_session_year,
    normalize_session_year,
)

__all__ = [
    "settings",
    "Settings",
    "ConfigurationError",
    "NYS_API_BASE_URL",
    "NYS_SITE_BASE_URL",
    "current_session_year",
    "normalize_session_year",
]
