"""
engine/runner.py — One complete load run.

Flow::

    launch persistent context ─► seed tab + login ─► provision tabs in batches
        ─► readiness gates (all tabs) ─► per tab: [branch] → model → prompt
        ─► tally ─► report ─► hold the browser open / auto-close

Setup failures (bad site, browser launch, seed navigation, login) raise
:class:`SetupError`; everything after provisioning is per-tab and recoverable.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from pathlib import Path
from typing import TYPE_CHECKING

from playwright.async_api import Error as PlaywrightError
from playwright.async_api import async_playwright

from tabburst.core.config import VIEWPORT
from tabburst.core.exception import SetupError
from tabburst.engine.aggregator import Tally
from tabburst.engine.auth import handle_authentication
from tabburst.engine.branching import create_branch
from tabburst.engine.injector import PromptInjector
from tabburst.engine.model import select_model
from tabburst.engine.provisioner import TabHandle, TabProvisioner, partition
from tabburst.engine.readiness import wait_for_tab
from tabburst.page_objects.locators import load_site
from tabburst.page_objects.page import SitePage

if TYPE_CHECKING:
    from playwright.async_api import BrowserContext, Playwright

    from tabburst.core.config import BurstConfig

log = logging.getLogger(__name__)


async def launch_context(playwright: Playwright, cfg: BurstConfig) -> BrowserContext:
    """Launch Chromium on the persistent profile directory (created if missing)."""
    Path(cfg.user_data_dir).mkdir(parents=True, exist_ok=True)
    options = dict(headless=cfg.headless, viewport=dict(VIEWPORT), args=list(cfg.browser_args))
    if cfg.channel:
        options["channel"] = cfg.channel
    try:
        return await playwright.chromium.launch_persistent_context(cfg.user_data_dir, **options)
    except PlaywrightError as exc:
        raise SetupError(
            f"Could not launch browser with profile {cfg.user_data_dir!r} "
            f"(is another instance using it?): {exc}",
            reason="browser_launch_failed",
        ) from exc


async def seed_session(context: BrowserContext, site, cfg: BurstConfig, target_url: str) -> SitePage:
    """Open the seed tab so cached credentials load, then make sure we are logged in."""
    page = context.pages[0] if context.pages else await context.new_page()
    seed = SitePage(page, site, 0)
    log.info("Navigating to %s…", target_url)
    try:
        await seed.navigate(target_url, cfg.navigation_timeout_s, wait_until="load")
    except PlaywrightError as exc:
        raise SetupError(f"Seed navigation to {target_url} failed: {exc}", reason="navigation_failed") from exc

    (await handle_authentication(seed, cfg)).raise_if_fatal()
    return seed


async def process_tab(handle: TabHandle, cfg: BurstConfig) -> bool:
    """Branch (optional) → model → prompt for one tab.  Returns success."""
    if not handle.ready:
        log.info("%s skipped: setup failed (%s)", handle.tab.prefix, handle.setup.reason)
        return False

    tab = handle.tab
    log.info("%s starting prompt submission…", tab.prefix)
    if cfg.create_branch:
        branch = await create_branch(tab, cfg)
        if not branch.ok:
            log.info("%s continuing without a branch (%s)", tab.prefix, branch.reason)

    await asyncio.sleep(cfg.prompt_settle_s)
    if not await select_model(tab, cfg.model):
        log.info("%s model selection failed, continuing with default model", tab.prefix)

    injection = await PromptInjector(cfg).run(tab)
    if not injection.succeeded:
        log.warning("%s prompt not submitted (%s)", tab.prefix, injection.result.reason)
    return injection.succeeded


async def submit_all(handles: list[TabHandle], cfg: BurstConfig) -> Tally:
    """Submit prompts in batches of ``cfg.prompt_batch`` and tally the results."""
    tally = Tally(total=cfg.tabs)
    batches = partition(len(handles), cfg.prompt_batch)
    log.info("=== Starting prompt injection for %d tabs ===", len(handles))
    for number, batch in enumerate(batches, 1):
        log.info(
            "--- Prompt batch %d/%d (tabs %d-%d) ---", number, len(batches), batch.start + 1, batch.stop
        )
        outcomes = await asyncio.gather(*(process_tab(handles[i], cfg) for i in batch))
        tally.add(outcomes)
        log.info(tally.progress_line())
        if number < len(batches):
            await asyncio.sleep(cfg.prompt_batch_delay_s)
    return tally


async def hold_open(cfg: BurstConfig) -> None:
    """Keep the browser (and its load) alive, or close after ``cfg.auto_close_s``."""
    if cfg.auto_close_s > 0:
        log.info("Auto-closing in %.0fs…", cfg.auto_close_s)
        await asyncio.sleep(cfg.auto_close_s)
        return
    log.info("Leave this running to sustain load. Ctrl+C to exit.")
    await asyncio.Event().wait()


async def run(cfg: BurstConfig, report: Callable[[Tally], None] | None = None) -> Tally:
    """Execute a full run.  ``report`` is called with the tally before the hold phase."""
    site = load_site(cfg.site).with_prompt_override(cfg.prompt_selector)
    target_url = cfg.url or site.start_url

    async with async_playwright() as playwright:
        context = await launch_context(playwright, cfg)
        try:
            await seed_session(context, site, cfg, target_url)
            log.info("Authentication successful, proceeding with load test")

            handles = await TabProvisioner(context, site, cfg, target_url).provision()
            await asyncio.gather(*(wait_for_tab(h.tab, cfg) for h in handles if h.ready))

            tally = await submit_all(handles, cfg)
            log.info(tally.summary_line())
            if report:
                report(tally)
            await hold_open(cfg)
        finally:
            await context.close()
    return tally
