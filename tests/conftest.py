"""
Pytest configuration and shared fixtures for Nina SDK tests.

Provides:
- Byte builders for every on-chain record (``fixtures/records.py``)
- An in-memory ledger gateway and enricher (``fixtures/ledger.py``)
- Configuration dictionaries
- Automatic ``unit`` marker for everything under ``tests/unit``
"""

import logging
from typing import Any

import pytest


pytest_plugins = ["fixtures.records", "fixtures.ledger"]


# ============================================================================
# Logging Configuration
# ============================================================================


@pytest.fixture(scope="session", autouse=True)
def setup_logging() -> None:
    """Configure logging for tests."""
    logging.basicConfig(level=logging.DEBUG)


@pytest.fixture(autouse=True)
def clean_api_key_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep a developer's NINA_API_KEY out of the tests."""
    monkeypatch.delenv("NINA_API_KEY", raising=False)


# ============================================================================
# Configuration Fixtures
# ============================================================================


@pytest.fixture
def client_config_dict() -> dict[str, Any]:
    """Complete client configuration as it would be loaded from YAML."""
    return {
        "cluster": "devnet",
        "api": {
            "endpoint": "https://api.example.com/v1/",
            "timeout": 10.0,
        },
        "ledger": {
            "batch_size": 2,
            "commitment": "finalized",
            "retry": {
                "max_attempts": 3,
                "initial_delay": 0.1,
                "max_delay": 1.0,
            },
        },
        "logging": {"level": "DEBUG"},
    }


# ============================================================================
# Pytest Hooks
# ============================================================================


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    """Mark every test under tests/unit as a unit test."""
    for item in items:
        if "unit" in item.path.parts:
            item.add_marker(pytest.mark.unit)
