"""
conftest.py — Shared fixtures for the engine unit tests.

The simulated DOM itself lives in fakes.py.
"""

from __future__ import annotations

import asyncio

import pytest
from fakes import FakePage

from tabburst.core.config import BurstConfig
from tabburst.page_objects.locators import Site
from tabburst.page_objects.page import Candidate, SitePage

# ── Fixtures ─────────────────────────────────────────────────────────────────


@pytest.fixture(autouse=True)
def sleeps(monkeypatch):
    """Make asyncio.sleep instant; the list records every requested delay."""
    requested: list[float] = []
    real_sleep = asyncio.sleep

    async def _sleep(delay, result=None):
        requested.append(delay)
        await real_sleep(0)
        return result

    monkeypatch.setattr(asyncio, "sleep", _sleep)
    return requested


@pytest.fixture
def site():
    """A small site config with simple selectors."""
    return Site(
        name="test",
        title="Test app",
        host="example.test",
        start_url="https://example.test/app",
        fallback_url="https://example.test/home",
        ready_checks=("#app", "nav"),
        interface_checks=("textarea", "nav"),
        prompt_candidates=(
            Candidate("css", "div.editor"),
            Candidate("css", "textarea"),
            Candidate("role", "textbox", "prompt"),
        ),
        send_button=(Candidate("css", "button.send"),),
        decoy_patterns=("branch",),
        decoy_attributes=("placeholder", "aria-label"),
        login_indicators=(Candidate("css", "button.login"),),
        auth_indicators=(Candidate("css", "nav"),),
        model_dropdown=(Candidate("css", "button.model"),),
        model_menu_item="li.menu",
        model_options={"gpt-5-mini": "GPT-5 Mini", "gpt-5": "GPT-5"},
        model_fallback="gpt-5-mini",
        new_branch=(Candidate("css", "button.new-branch"),),
        branch_name_input=(Candidate("css", "input.branch"),),
        branch_confirm=(Candidate("css", "button.create"),),
    )


@pytest.fixture
def cfg():
    return BurstConfig(tabs=3, prompt_text="hello", headless=True, user_data_dir="unused")


@pytest.fixture
def make_tab(site):
    """Build a SitePage over a FakePage: ``make_tab(css={...}, index=2)``."""

    def _make(index=1, total=None, **page_kwargs):
        return SitePage(FakePage(**page_kwargs), site, index, total)

    return _make
