"""
Pytest Configuration and Fixtures

This module provides:
- Shared fixtures for all tests (backends, stores, session managers)
- Test category markers
"""

import importlib
import os
import pytest
import sys
from pathlib import Path
from unittest.mock import Mock, patch

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from tests.test_config import CONFIG, EXPECTED, TEST_DATA

from ideaboard.backend import BackendClient, MockBackendClient
from ideaboard.feed import IdeaFeedStore
from ideaboard.session import SessionManager


# =============================================================================
# MARKERS FOR TEST CATEGORIES
# =============================================================================

def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "config_validation: Configuration validation tests"
    )
    config.addinivalue_line(
        "markers", "cli_behavior: CLI interface tests"
    )
    config.addinivalue_line(
        "markers", "concurrency: Interleaving and liveness tests"
    )


# =============================================================================
# SHARED FIXTURES
# =============================================================================

@pytest.fixture
def test_config():
    """Provide access to test configuration."""
    return CONFIG


@pytest.fixture
def expected_values():
    """Provide access to expected values."""
    return EXPECTED


@pytest.fixture
def test_data():
    """Provide access to test data."""
    return TEST_DATA


@pytest.fixture
def mock_backend():
    """A fresh in-memory backend."""
    return MockBackendClient()


@pytest.fixture
def alice(mock_backend):
    """Register alice on the mock backend and log her in; returns her account."""
    creds = TEST_DATA["accounts"]["alice"]
    account = mock_backend.create_account("alice_id", creds["email"], creds["password"])
    mock_backend.create_email_password_session(creds["email"], creds["password"])
    return account


@pytest.fixture
def spec_backend():
    """A Mock constrained to the BackendClient interface."""
    backend = Mock(spec=BackendClient)
    backend.name = "spec_mock"
    backend.list_documents.return_value = []
    return backend


@pytest.fixture
def feed_store(mock_backend):
    """IdeaFeedStore over the in-memory backend."""
    store = IdeaFeedStore(
        mock_backend,
        database_id=CONFIG["database_id"],
        collection_id=CONFIG["collection_id"],
    )
    yield store
    store.dispose()


@pytest.fixture
def navigate():
    """Records navigation side effects."""
    return Mock()


@pytest.fixture
def session_manager(mock_backend, navigate):
    """SessionManager over the in-memory backend."""
    manager = SessionManager(mock_backend, navigate=navigate)
    yield manager
    manager.dispose()


@pytest.fixture
def reload_config():
    """
    Reload ideaboard.config.config under a patched environment.

    Call with a dict of environment variables; pass clear=True to start
    from an empty environment. The module is reloaded again afterwards
    so later tests see the real configuration.
    """
    import ideaboard.config.config as config_module
    patches = []

    def load(env, clear=False):
        patcher = patch.dict(os.environ, env, clear=clear)
        patcher.start()
        patches.append(patcher)
        return importlib.reload(config_module)

    yield load

    for patcher in reversed(patches):
        patcher.stop()
    importlib.reload(config_module)
