"""Root pytest configuration for test discovery and auto-skip behavior.

All tests stay visible to test explorers; integration and manual (push-TAN)
tests are skipped unless explicitly enabled.

Test Structure:
    tests/
    ├── unit/
    │   ├── domain/            # Value objects, entities, domain services
    │   ├── application/       # Session manager and sync pipeline
    │   ├── infrastructure/    # Bank and ledger adapters (httpx.MockTransport)
    │   └── presentation/      # CLI
    └── integration/           # Real YNAB API (@pytest.mark.integration) and
                               # Comdirect push-TAN (@pytest.mark.tan, manual)

Environment Variables:
    RUN_INTEGRATION=1    Run @pytest.mark.integration tests
    RUN_MANUAL_TAN=1     Run @pytest.mark.tan and @pytest.mark.manual tests
    RUN_ALL_TESTS=1      Run all tests (overrides other settings)

Pytest Options:
    --run-integration    Run integration tests
    --run-manual         Run manual/TAN tests
    --run-all            Run all tests
"""

import os
from pathlib import Path

import pytest
from dotenv import load_dotenv

from budgetbuddy_config import clear_settings_cache

PROJECT_ROOT = Path(__file__).resolve().parents[1]

CONFIG_DIR = PROJECT_ROOT / "config"
if (CONFIG_DIR / ".env.test").exists():
    load_dotenv(CONFIG_DIR / ".env.test")

TRUTHY = ("1", "true", "yes")


def pytest_addoption(parser):
    """Add custom command line options."""
    parser.addoption(
        "--run-integration",
        action="store_true",
        default=False,
        help="Run tests marked with @pytest.mark.integration",
    )
    parser.addoption(
        "--run-manual",
        action="store_true",
        default=False,
        help="Run tests marked with @pytest.mark.manual or @pytest.mark.tan",
    )
    parser.addoption(
        "--run-all",
        action="store_true",
        default=False,
        help="Run all tests regardless of markers",
    )


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers",
        "integration: Tests talking to real bank or ledger APIs (auto-skipped)",
    )
    config.addinivalue_line(
        "markers",
        "manual: Tests requiring manual intervention (auto-skipped)",
    )
    config.addinivalue_line(
        "markers",
        "tan: Tests requiring push-TAN approval (auto-skipped)",
    )


def _enabled(config, option: str, env_var: str) -> bool:
    return bool(config.getoption(option)) or (
        os.environ.get(env_var, "").lower() in TRUTHY
    )


def pytest_collection_modifyitems(config, items):
    """Auto-skip tests based on markers unless explicitly enabled."""
    if _enabled(config, "--run-all", "RUN_ALL_TESTS"):
        return

    gated = []
    if not _enabled(config, "--run-integration", "RUN_INTEGRATION"):
        gated.append(
            (
                {"integration"},
                pytest.mark.skip(
                    reason="Integration test - run with --run-integration or RUN_INTEGRATION=1",
                ),
            ),
        )
    if not _enabled(config, "--run-manual", "RUN_MANUAL_TAN"):
        gated.append(
            (
                {"manual", "tan"},
                pytest.mark.skip(
                    reason="Manual/TAN test - run with --run-manual or RUN_MANUAL_TAN=1",
                ),
            ),
        )

    for item in items:
        item_markers = {mark.name for mark in item.iter_markers()}
        for markers, skip in gated:
            if item_markers & markers:
                item.add_marker(skip)


@pytest.fixture(scope="session", autouse=True)
def configure_app_settings():
    """Start and finish the test session with a fresh settings cache."""
    clear_settings_cache()
    yield
    clear_settings_cache()
