"""
engine/readiness.py — "Is this tab ready enough?" polling.

A page is ready as soon as ANY of a set of DOM predicates matches; full
hydration is never required.  Predicates are CSS selectors from the site
locator config, evaluated in the page with ``document.querySelector``.

Polling is count-based: ``floor(timeout / interval) + 1`` polls, the first
at t=0 and the last at t=timeout, so a predicate that turns true on the final
poll is still reported ready.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING

from playwright.async_api import Error as PlaywrightError

if TYPE_CHECKING:
    from tabburst.core.config import BurstConfig
    from tabburst.page_objects.page import SitePage

log = logging.getLogger(__name__)

# Returns the index of the first selector that matches, or -1
FIRST_MATCH_JS = """(selectors) => {
  for (let i = 0; i < selectors.length; i++) {
    try {
      if (document.querySelector(selectors[i])) return i;
    } catch (e) {}
  }
  return -1;
}"""


class Readiness(str, Enum):
    READY = "ready"
    TIMEOUT = "timeout"


@dataclass(frozen=True)
class ReadyResult:
    state: Readiness
    matched: str | None = None
    polls: int = 0

    @property
    def ready(self) -> bool:
        return self.state is Readiness.READY


def poll_count(timeout_s: float, interval_s: float) -> int:
    """Number of polls in a window, including the one at t=0."""
    if interval_s <= 0:
        return 1
    return max(1, int(timeout_s // interval_s) + 1)


async def first_match(tab: SitePage, checks) -> int:
    """Index of the first matching check, -1 if none (or the page is mid-navigation)."""
    try:
        return await tab.page.evaluate(FIRST_MATCH_JS, list(checks))
    except PlaywrightError as exc:
        log.debug("%s readiness probe failed: %s", tab.prefix, exc)
        return -1


async def wait_until_ready(tab: SitePage, checks, timeout_s: float, interval_s: float) -> ReadyResult:
    """Poll ``checks`` until one matches or the window closes."""
    checks = list(checks)
    polls = poll_count(timeout_s, interval_s)
    for attempt in range(1, polls + 1):
        idx = await first_match(tab, checks)
        if idx is not None and 0 <= idx < len(checks):
            return ReadyResult(Readiness.READY, checks[idx], attempt)
        if attempt < polls:
            await asyncio.sleep(interval_s)
    return ReadyResult(Readiness.TIMEOUT, None, polls)


async def wait_for_tab(tab: SitePage, cfg: BurstConfig) -> ReadyResult:
    """Run both readiness gates for a tab.  Best effort: timeouts only warn."""
    try:
        await tab.wait_for_load(cfg.navigation_timeout_s)
    except PlaywrightError as exc:
        log.warning("%s load state not reached: %s", tab.prefix, exc)

    shell = await wait_until_ready(tab, tab.site.ready_checks, cfg.ready_timeout_s, cfg.ready_poll_s)
    if not shell.ready:
        log.warning("%s app shell not detected after %.0fs, proceeding anyway", tab.prefix, cfg.ready_timeout_s)

    log.info("%s waiting for interface to be ready…", tab.prefix)
    ui = await wait_until_ready(tab, tab.site.interface_checks, cfg.interface_timeout_s, cfg.interface_poll_s)
    if ui.ready:
        log.info("%s interface appears ready (%s)", tab.prefix, ui.matched)
    else:
        log.warning("%s timeout waiting for interface after %.0fs", tab.prefix, cfg.interface_timeout_s)
    return ui
