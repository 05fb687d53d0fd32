"""
tests/ui/conftest.py — pytest configuration for the real-browser tests.

Registers the smoke marker so pytest doesn't warn about it:
    @pytest.mark.smoke

Skips every test under tests/ui when playwright is not installed.
UITestCase additionally skips when the Chromium binary is missing.
"""

from __future__ import annotations

import pytest


def pytest_configure(config: pytest.Config) -> None:
    config.addinivalue_line("markers", "smoke: smoke-level browser tests — fast sanity check")


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    """Skip all UI tests if playwright is not installed."""
    try:
        import playwright  # noqa: F401
    except ImportError:
        skip_marker = pytest.mark.skip(reason="playwright not installed — run: pip install -e .[test]")
        for item in items:
            if "tests/ui" in str(item.fspath):
                item.add_marker(skip_marker)
