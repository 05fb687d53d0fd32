"""
test_auth.py — Unit tests for engine/auth.py

Covers the login heuristic and the headless / interactive authentication flow.
"""

import asyncio
from dataclasses import replace

from fakes import FakeElement

from tabburst.core.results import ErrorKind
from tabburst.engine.auth import check_authentication, handle_authentication


class TestCheckAuthentication:
    def test_login_button_wins_over_everything(self, make_tab):
        tab = make_tab(css={"button.login": [FakeElement()], "nav": [FakeElement()]})
        status = asyncio.run(check_authentication(tab, headless=True))
        assert not status.authenticated
        assert status.reason == "login_required"

    def test_signed_in_indicator(self, make_tab):
        tab = make_tab(css={"nav": [FakeElement()]})
        status = asyncio.run(check_authentication(tab, headless=False))
        assert status.authenticated
        assert status.reason == "authenticated"

    def test_hidden_login_button_is_ignored(self, make_tab):
        tab = make_tab(css={"button.login": [FakeElement(visible=False)], "nav": [FakeElement()]})
        assert asyncio.run(check_authentication(tab, headless=False)).authenticated

    def test_on_site_host_without_login_controls(self, make_tab):
        tab = make_tab(url="https://example.test/app/projects")
        status = asyncio.run(check_authentication(tab, headless=False))
        assert status.authenticated
        assert status.reason == "on_site_page"

    def test_login_url_is_not_trusted(self, make_tab):
        tab = make_tab(url="https://example.test/login?next=/app")
        status = asyncio.run(check_authentication(tab, headless=False))
        assert not status.authenticated
        assert status.reason == "unknown"

    def test_headless_assumes_authenticated_when_unsure(self, make_tab):
        tab = make_tab(url="https://sso.other.test/")
        status = asyncio.run(check_authentication(tab, headless=True))
        assert status.authenticated
        assert status.reason == "headless_assumption"


class TestHandleAuthentication:
    def test_already_authenticated(self, make_tab, cfg):
        tab = make_tab(css={"nav": [FakeElement()]})
        assert asyncio.run(handle_authentication(tab, cfg)).ok

    def test_headless_login_required_is_fatal(self, make_tab, cfg):
        tab = make_tab(css={"button.login": [FakeElement()]})
        result = asyncio.run(handle_authentication(tab, cfg))
        assert not result.ok
        assert result.kind is ErrorKind.FATAL
        assert result.reason == "headless_login_required"

    def test_interactive_waits_for_login(self, make_tab, cfg, sleeps):
        """The user logs in while we poll; the flow succeeds on the next check."""
        login = FakeElement()
        tab = make_tab(css={"button.login": [login]}, url="https://example.test/login")
        interactive = replace(cfg, headless=False, auth_poll_s=5.0, auth_wait_s=300.0)

        polls = {"n": 0}

        async def logs_in_after_two_polls():
            polls["n"] += 1
            if polls["n"] == 2:
                login.visible = False
                tab.page.css["nav"] = [FakeElement()]

        async def run():
            real_wait = tab.page.wait_for_load_state

            async def wait(state=None, timeout=None):
                await logs_in_after_two_polls()
                return await real_wait(state, timeout)

            tab.page.wait_for_load_state = wait
            return await handle_authentication(tab, interactive)

        result = asyncio.run(run())
        assert result.ok
        assert sleeps.count(5.0) == 1

    def test_interactive_timeout_is_fatal(self, make_tab, cfg, sleeps):
        tab = make_tab(css={"button.login": [FakeElement()]})
        interactive = replace(cfg, headless=False, auth_poll_s=5.0, auth_wait_s=20.0)

        result = asyncio.run(handle_authentication(tab, interactive))
        assert result.kind is ErrorKind.FATAL
        assert result.reason == "timeout"
        assert sleeps.count(5.0) == 4
