"""
engine/auth.py — Login detection and the interactive login wait.

Sessions are reused through the persistent browser profile, so most runs are
already logged in.  The check is heuristic:

  1. a visible login button            → login required
  2. a visible signed-in indicator     → authenticated
  3. on the site host, not a login URL → authenticated
  4. headless                          → assume authenticated
  5. otherwise                         → unknown (treated as not logged in)

In headless mode an explicit login requirement is fatal: the user must run
once with a visible browser to log in.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from playwright.async_api import Error as PlaywrightError

from tabburst.core.config import AUTH_SETTLE_S
from tabburst.core.results import StepResult
from tabburst.engine.resolver import first_visible

if TYPE_CHECKING:
    from tabburst.core.config import BurstConfig
    from tabburst.page_objects.page import SitePage

log = logging.getLogger(__name__)

LOAD_TIMEOUT_S = 30.0


@dataclass(frozen=True)
class AuthStatus:
    authenticated: bool
    reason: str
    evidence: str = ""


async def check_authentication(tab: SitePage, headless: bool) -> AuthStatus:
    """Classify the tab's current page as logged in or not."""
    site = tab.site
    log.info("%s checking authentication status…", tab.prefix)
    try:
        await tab.wait_for_load(LOAD_TIMEOUT_S)
        await asyncio.sleep(AUTH_SETTLE_S)

        login = await first_visible(tab, site.login_indicators)
        if login:
            log.info("%s found explicit login control: %s", tab.prefix, login.candidate)
            return AuthStatus(False, "login_required", str(login.candidate))

        signed_in = await first_visible(tab, site.auth_indicators)
        if signed_in:
            log.info("%s found authenticated indicator: %s", tab.prefix, signed_in.candidate)
            return AuthStatus(True, "authenticated", str(signed_in.candidate))

        url = tab.url or ""
        if site.host and site.host in url and not any(m in url for m in site.login_url_markers):
            log.info("%s on %s without login controls, assuming authenticated", tab.prefix, site.host)
            return AuthStatus(True, "on_site_page", url)

        if headless:
            log.info("%s headless mode, assuming authenticated from a previous login", tab.prefix)
            return AuthStatus(True, "headless_assumption")

        log.info("%s could not determine authentication status", tab.prefix)
        return AuthStatus(False, "unknown")
    except PlaywrightError as exc:
        log.warning("%s error checking authentication: %s", tab.prefix, exc)
        if headless:
            return AuthStatus(True, "headless_error_assumption")
        return AuthStatus(False, "error")


async def handle_authentication(tab: SitePage, cfg: BurstConfig) -> StepResult:
    """Make sure the seed tab is logged in.  Failures here are fatal to the run."""
    status = await check_authentication(tab, cfg.headless)
    if status.authenticated:
        log.info("%s already authenticated, proceeding", tab.prefix)
        return StepResult.success(status.reason)

    log.info("%s authentication status: %s", tab.prefix, status.reason)

    if cfg.headless:
        if status.reason == "login_required":
            return StepResult.fatal(
                "headless_login_required",
                "Explicit login required but running in headless mode. "
                "Run once without --headless to complete login, then reuse the profile.",
            )
        log.info("%s headless mode, proceeding (assuming authenticated)", tab.prefix)
        return StepResult.success("headless_assumption")

    log.info("%s please complete login in the browser window…", tab.prefix)
    waited = 0.0
    while waited < cfg.auth_wait_s:
        await asyncio.sleep(cfg.auth_poll_s)
        waited += cfg.auth_poll_s
        status = await check_authentication(tab, cfg.headless)
        if status.authenticated:
            log.info("%s authentication completed", tab.prefix)
            return StepResult.success(status.reason)
        log.info("%s still waiting for authentication… (%.0fs elapsed)", tab.prefix, waited)

    return StepResult.fatal("timeout", f"Authentication timeout after {cfg.auth_wait_s / 60:.0f} minutes")
