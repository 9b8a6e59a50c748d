"""Test-suite wide configuration: environment, markers and opt-in suites.

Test Structure:
    tests/
    ├── unit/              # Fast, isolated tests (mocks, in-memory stores)
    ├── integration/       # SQLite-backed repositories and API; live Redis
    └── shared/            # Shared fixtures and utilities

Environment Variables:
    RUN_INTEGRATION=1    Run @pytest.mark.integration tests (live Redis)
    RUN_ALL_TESTS=1      Run everything, including opt-in suites

Pytest Options:
    --run-integration    Same as RUN_INTEGRATION=1
    --run-all            Same as RUN_ALL_TESTS=1
"""

import os
from pathlib import Path

import pytest
from dotenv import load_dotenv

from agora_config import clear_settings_cache

PROJECT_ROOT = Path(__file__).resolve().parents[1]

# Load .env.test when present (same discovery as local development)
CONFIG_DIR = PROJECT_ROOT / "config"
if (CONFIG_DIR / ".env.test").exists():
    load_dotenv(CONFIG_DIR / ".env.test")

# Required settings; never real secrets
os.environ.setdefault("JWT_SECRET_KEY", "test-jwt-secret-for-testing-only-0123456789")
os.environ.setdefault("POSTGRES_PASSWORD", "test-password")


def pytest_addoption(parser):
    parser.addoption(
        "--run-integration",
        action="store_true",
        default=False,
        help="Also run tests that need live services (Redis)",
    )
    parser.addoption(
        "--run-all",
        action="store_true",
        default=False,
        help="Run every test, ignoring opt-in markers",
    )


def pytest_configure(config):
    config.addinivalue_line(
        "markers",
        "integration: Tests that need live external services such as Redis (auto-skipped)",
    )


def _flag(config, option: str, env_var: str) -> bool:
    return config.getoption(option) or os.environ.get(env_var, "").lower() in (
        "1",
        "true",
        "yes",
    )


def pytest_collection_modifyitems(config, items):
    """Auto-skip integration tests unless explicitly enabled."""
    if _flag(config, "--run-all", "RUN_ALL_TESTS"):
        return

    if _flag(config, "--run-integration", "RUN_INTEGRATION"):
        return

    skip_integration = pytest.mark.skip(
        reason="needs live services; enable with --run-integration or RUN_INTEGRATION=1",
    )
    for item in items:
        # Explicit marker only, not folder name
        if "integration" in {mark.name for mark in item.iter_markers()}:
            item.add_marker(skip_integration)


@pytest.fixture(scope="session", autouse=True)
def configure_app_settings():
    """Start and end the session with a fresh settings cache."""
    clear_settings_cache()
    yield
    clear_settings_cache()
