"""
engine/provisioner.py — Open N tabs in fixed-size batches.

Tabs in one batch are opened concurrently (issued in index order with a small
stagger, joined with ``asyncio.gather``); the next batch starts only after the
previous one has finished and the inter-batch pause has elapsed.  This caps
how much memory and network the single browser process takes on at once.

Navigation failure policy: always recoverable.  A tab that cannot load is
recorded with a failed setup result and counted as unsuccessful; the run
continues with the remaining tabs.  With ``--create-branch`` the site's
secondary URL is tried before giving up on the tab.
"""

from __future__ import annotations

import asyncio
import logging
import uuid
from dataclasses import dataclass
from typing import TYPE_CHECKING
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

from playwright.async_api import Error as PlaywrightError

from tabburst.core.results import StepResult
from tabburst.engine.auth import check_authentication
from tabburst.page_objects.page import SitePage

if TYPE_CHECKING:
    from playwright.async_api import BrowserContext

    from tabburst.core.config import BurstConfig
    from tabburst.page_objects.locators import Site

log = logging.getLogger(__name__)


def partition(total: int, size: int) -> list[range]:
    """Split indices ``0..total-1`` into consecutive ranges of at most ``size``."""
    if total <= 0:
        return []
    size = max(1, size)
    return [range(start, min(start + size, total)) for start in range(0, total, size)]


def cache_bust(url: str, index: int) -> str:
    """Append ``loadtest=<uuid>&i=<index>`` so every tab gets a fresh session URL."""
    parts = urlsplit(url)
    query = parse_qsl(parts.query, keep_blank_values=True)
    query += [("loadtest", str(uuid.uuid4())), ("i", str(index))]
    return urlunsplit(parts._replace(query=urlencode(query)))


@dataclass
class TabHandle:
    """A provisioned tab and how its setup went."""

    tab: SitePage
    setup: StepResult

    @property
    def ready(self) -> bool:
        return self.setup.ok

    @property
    def index(self) -> int:
        return self.tab.index


class TabProvisioner:
    """Opens ``cfg.tabs`` pages in ``context`` against ``target_url``."""

    def __init__(self, context: BrowserContext, site: Site, cfg: BurstConfig, target_url: str) -> None:
        self.context = context
        self.site = site
        self.cfg = cfg
        self.target_url = target_url

    async def provision(self) -> list[TabHandle]:
        cfg = self.cfg
        batches = partition(cfg.tabs, cfg.provision_batch)
        log.info("Opening %d tabs in batches of %d…", cfg.tabs, cfg.provision_batch)

        handles: list[TabHandle] = []
        for number, batch in enumerate(batches, 1):
            log.info(
                "=== Batch %d/%d (tabs %d-%d) ===", number, len(batches), batch.start + 1, batch.stop
            )
            opened = await asyncio.gather(
                *(self.open_tab(i + 1, offset) for offset, i in enumerate(batch))
            )
            handles.extend(opened)
            if number < len(batches):
                log.info("Batch %d complete, waiting %.0fs before next batch…", number, cfg.provision_batch_delay_s)
                await asyncio.sleep(cfg.provision_batch_delay_s)

        failed = sum(1 for h in handles if not h.ready)
        if failed:
            log.warning("%d/%d tabs failed to load and will be counted as unsuccessful", failed, len(handles))
        return handles

    async def open_tab(self, index: int, offset: int = 0) -> TabHandle:
        """Open tab ``index`` (1-based) after ``offset`` stagger steps."""
        if offset:
            await asyncio.sleep(offset * self.cfg.tab_stagger_s)
        try:
            page = await self.context.new_page()
        except PlaywrightError as exc:
            tab = SitePage(None, self.site, index, self.cfg.tabs)
            log.error("%s could not open a new page: %s", tab.prefix, exc)
            return TabHandle(tab, StepResult.recoverable("page_open_failed", str(exc)))
        tab = SitePage(page, self.site, index, self.cfg.tabs)

        setup = await self._navigate(tab)
        if setup.ok:
            status = await check_authentication(tab, self.cfg.headless)
            if status.authenticated:
                log.info("%s tab authentication confirmed", tab.prefix)
            else:
                log.warning("%s tab may not be authenticated (%s) and may fail", tab.prefix, status.reason)
        return TabHandle(tab, setup)

    async def _navigate(self, tab: SitePage) -> StepResult:
        timeout = self.cfg.navigation_timeout_s
        try:
            await tab.navigate(cache_bust(self.target_url, tab.index), timeout)
            log.info("%s navigated to %s", tab.prefix, self.target_url)
            return StepResult.success()
        except PlaywrightError as exc:
            log.error("%s failed to navigate to %s: %s", tab.prefix, self.target_url, exc)
            primary_error = str(exc)

        fallback = self.site.fallback_url
        if self.cfg.create_branch and fallback and fallback != self.target_url:
            log.info("%s falling back to %s", tab.prefix, fallback)
            try:
                await tab.navigate(cache_bust(fallback, tab.index), timeout)
                return StepResult.success("fallback_url")
            except PlaywrightError as exc:
                log.error("%s fallback navigation failed: %s", tab.prefix, exc)
                return StepResult.recoverable("navigation_failed", str(exc))
        return StepResult.recoverable("navigation_failed", primary_error)
