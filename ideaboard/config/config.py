"""
Configuration module for Idea Board.

Loads environment variables from .env file and exposes them as typed configuration values.
Uses python-dotenv for loading and provides safe defaults where appropriate.
"""

import os
from pathlib import Path
from dotenv import load_dotenv

from ideaboard.config.errors import ConfigurationError

# Load .env file from project root
# The .env file should be in the root directory (parent of ideaboard/)
_project_root = Path(__file__).parent.parent.parent
_env_path = _project_root / ".env"
load_dotenv(_env_path)


# =============================================================================
# Application Environment
# =============================================================================

# Application environment: "development", "staging", or "production"
APP_ENV: str = os.getenv("APP_ENV", "development")

# Enable debug mode for verbose console diagnostics
DEBUG: bool = os.getenv("DEBUG", "false").lower() == "true"


# =============================================================================
# Appwrite Configuration
# =============================================================================

# API endpoint of the Appwrite instance, including the /v1 suffix
APPWRITE_ENDPOINT: str = os.getenv("APPWRITE_ENDPOINT", "")

# Project the web platform is registered under
APPWRITE_PROJECT_ID: str = os.getenv("APPWRITE_PROJECT_ID", "")

# Database and collection holding the idea documents
APPWRITE_DATABASE_ID: str = os.getenv("APPWRITE_DATABASE_ID", "")
APPWRITE_COLLECTION_ID: str = os.getenv("APPWRITE_COLLECTION_ID", "")


# =============================================================================
# Client Behaviour
# =============================================================================

# HTTP request timeout in seconds
REQUEST_TIMEOUT: int = int(os.getenv("REQUEST_TIMEOUT", "30"))

# Number of ideas kept in the feed window. Fixed, not read from the environment.
FEED_LIMIT: int = 10


# =============================================================================
# Web Dashboard
# =============================================================================

WEB_HOST: str = os.getenv("WEB_HOST", "127.0.0.1")
WEB_PORT: int = int(os.getenv("WEB_PORT", "5001"))


# =============================================================================
# Helper Functions
# =============================================================================

def is_production() -> bool:
    """Check if running in production environment."""
    return APP_ENV == "production"


def is_development() -> bool:
    """Check if running in development environment."""
    return APP_ENV == "development"


def validate_config() -> list[str]:
    """
    Validate that the Appwrite connection settings are present.

    Unlike optional tuning values, the endpoint, project, database and
    collection are required in every environment.

    Returns:
        List of missing or invalid configuration keys (empty if all valid).
    """
    errors = []

    if not APPWRITE_ENDPOINT:
        errors.append("APPWRITE_ENDPOINT is required")
    elif not APPWRITE_ENDPOINT.startswith(("http://", "https://")):
        errors.append(f"APPWRITE_ENDPOINT must start with http:// or https://, got {APPWRITE_ENDPOINT}")
    if not APPWRITE_PROJECT_ID:
        errors.append("APPWRITE_PROJECT_ID is required")
    if not APPWRITE_DATABASE_ID:
        errors.append("APPWRITE_DATABASE_ID is required")
    if not APPWRITE_COLLECTION_ID:
        errors.append("APPWRITE_COLLECTION_ID is required")

    if REQUEST_TIMEOUT < 1:
        errors.append("REQUEST_TIMEOUT must be at least 1 second")

    if not (0 < WEB_PORT < 65536):
        errors.append(f"WEB_PORT must be between 1 and 65535, got {WEB_PORT}")

    return errors


def require_config() -> None:
    """
    Fail fast when configuration is incomplete.

    Raises:
        ConfigurationError: Listing every problem found by validate_config().
    """
    errors = validate_config()
    if errors:
        raise ConfigurationError(errors)


def print_config_summary() -> None:
    """Print a summary of current configuration (safe for logs, no secrets)."""
    print(f"  APP_ENV: {APP_ENV}")
    print(f"  DEBUG: {DEBUG}")
    print(f"  APPWRITE_ENDPOINT: {APPWRITE_ENDPOINT or '(not set)'}")
    print(f"  APPWRITE_PROJECT_ID: {'***' if APPWRITE_PROJECT_ID else '(not set)'}")
    print(f"  APPWRITE_DATABASE_ID: {APPWRITE_DATABASE_ID or '(not set)'}")
    print(f"  APPWRITE_COLLECTION_ID: {APPWRITE_COLLECTION_ID or '(not set)'}")
    print(f"  REQUEST_TIMEOUT: {REQUEST_TIMEOUT}s")
    print(f"  FEED_LIMIT: {FEED_LIMIT}")
    print(f"  WEB: {WEB_HOST}:{WEB_PORT}")
