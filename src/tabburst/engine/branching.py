"""engine/branching.py — Create an isolated workspace branch in a tab.

Used when a run is started with ``--create-branch`` so that each tab's
prompt lands in its own branch instead of the shared main workspace.  The
branch-name field is the target here, so no decoy filter is applied; the
prompt resolver later skips it as a decoy.

Every failure is recoverable: the tab stays on the main workspace and still
submits its prompt.
"""

from __future__ import annotations

import asyncio
import logging
import uuid
from typing import TYPE_CHECKING

from playwright.async_api import Error as PlaywrightError

from tabburst.core.config import CLICK_TIMEOUT_S, MENU_SETTLE_S
from tabburst.core.results import StepResult
from tabburst.engine.readiness import wait_until_ready
from tabburst.engine.resolver import first_visible

if TYPE_CHECKING:
    from tabburst.core.config import BurstConfig
    from tabburst.page_objects.page import SitePage

log = logging.getLogger(__name__)


def branch_name(index: int) -> str:
    """Unique per-run, per-tab branch name, e.g. ``loadtest-1a2b3c4d-7``."""
    return f"loadtest-{uuid.uuid4().hex[:8]}-{index}"


async def create_branch(tab: SitePage, cfg: BurstConfig, name: str | None = None) -> StepResult:
    site = tab.site
    if not site.new_branch:
        return StepResult.recoverable("branch_unsupported", f"site {site.name!r} has no branch controls")

    name = name or branch_name(tab.index)
    log.info("%s creating branch %s…", tab.prefix, name)
    try:
        trigger = await first_visible(tab, site.new_branch)
        if trigger is None:
            log.warning("%s new-branch control not found", tab.prefix)
            return StepResult.recoverable("branch_control_not_found")
        await trigger.element.click(timeout=CLICK_TIMEOUT_S * 1000)
        await asyncio.sleep(MENU_SETTLE_S)

        field = await first_visible(tab, site.branch_name_input)
        if field is None:
            log.warning("%s branch name field not found", tab.prefix)
            return StepResult.recoverable("branch_name_not_found")
        await field.element.fill(name)

        confirm = await first_visible(tab, site.branch_confirm)
        if confirm is not None and await confirm.element.is_enabled():
            await confirm.element.click(timeout=CLICK_TIMEOUT_S * 1000)
        else:
            await field.element.press("Enter")
    except PlaywrightError as exc:
        log.warning("%s branch creation failed: %s", tab.prefix, exc)
        return StepResult.recoverable("branch_failed", str(exc))

    ui = await wait_until_ready(tab, site.interface_checks, cfg.interface_timeout_s, cfg.interface_poll_s)
    if not ui.ready:
        log.warning("%s branch interface did not settle, continuing", tab.prefix)
    log.info("%s branch %s created", tab.prefix, name)
    return StepResult.success(name)
