"""
Configuration module.

Handles environment variables, Appwrite identifiers, and application settings.
"""

from ideaboard.config.config import (
    APP_ENV,
    DEBUG,
    APPWRITE_ENDPOINT,
    APPWRITE_PROJECT_ID,
    APPWRITE_DATABASE_ID,
    APPWRITE_COLLECTION_ID,
    REQUEST_TIMEOUT,
    FEED_LIMIT,
    WEB_HOST,
    WEB_PORT,
    is_production,
    is_development,
    validate_config,
    require_config,
    print_config_summary,
)
from ideaboard.config.errors import ConfigurationError

__all__ = [
    "APP_ENV",
    "DEBUG",
    "APPWRITE_ENDPOINT",
    "APPWRITE_PROJECT_ID",
    "APPWRITE_DATABASE_ID",
    "APPWRITE_COLLECTION_ID",
    "REQUEST_TIMEOUT",
    "FEED_LIMIT",
    "WEB_HOST",
    "WEB_PORT",
    "ConfigurationError",
    "is_production",
    "is_development",
    "validate_config",
    "require_config",
    "print_config_summary",
]
