"""
engine/injector.py — Type a prompt into the tab and submit it.

Per-tab state machine::

    locating ──► focused ──► typed ──► submitted
        │                      │           │
        └──────────► failed ◄──┴───────────┘

  - locating   resolve the prompt control; nothing found → failed
  - focused    click to focus; a failed click is logged, not fatal
  - typed      type with a per-character delay (fast input gets dropped
               by the editor's handlers)
  - submitted  contenteditable editors: Enter, then the send button if the
               text is still sitting in the editor; plain inputs: Enter

No step is retried.  Failures are recoverable: the tab is counted as
unsuccessful and the rest of the run carries on.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING

from playwright.async_api import Error as PlaywrightError

from tabburst.core.config import CLICK_TIMEOUT_S, FOCUS_SETTLE_S, LEFTOVER_READ_TIMEOUT_S, TYPED_SETTLE_S
from tabburst.core.results import StepResult
from tabburst.engine.resolver import first_visible, resolve

if TYPE_CHECKING:
    from tabburst.core.config import BurstConfig
    from tabburst.page_objects.page import SitePage

log = logging.getLogger(__name__)

DEBUG_LISTING_LIMIT = 3


class InjectState(str, Enum):
    LOCATING = "locating"
    FOCUSED = "focused"
    TYPED = "typed"
    SUBMITTED = "submitted"
    FAILED = "failed"


# Legal forward moves; FAILED is reachable from every non-terminal state
_NEXT = {
    InjectState.LOCATING: InjectState.FOCUSED,
    InjectState.FOCUSED: InjectState.TYPED,
    InjectState.TYPED: InjectState.SUBMITTED,
}


@dataclass
class Injection:
    """Progress of one tab through the state machine."""

    tab_index: int
    state: InjectState = InjectState.LOCATING
    result: StepResult | None = None
    candidate: str = ""
    history: list[InjectState] = field(default_factory=lambda: [InjectState.LOCATING])

    @property
    def done(self) -> bool:
        return self.state in (InjectState.SUBMITTED, InjectState.FAILED)

    @property
    def succeeded(self) -> bool:
        return self.state is InjectState.SUBMITTED

    def advance(self, to: InjectState) -> Injection:
        if _NEXT.get(self.state) is not to:
            raise ValueError(f"illegal transition {self.state.value} → {to.value}")
        self.state = to
        self.history.append(to)
        if to is InjectState.SUBMITTED:
            self.result = StepResult.success("submitted")
        return self

    def fail(self, reason: str, detail: str = "") -> Injection:
        if self.done:
            raise ValueError(f"cannot fail from terminal state {self.state.value}")
        self.state = InjectState.FAILED
        self.history.append(InjectState.FAILED)
        self.result = StepResult.recoverable(reason, detail)
        return self


class PromptInjector:
    """Drives one tab from ``locating`` to a terminal state."""

    def __init__(self, cfg: BurstConfig) -> None:
        self.cfg = cfg

    async def run(self, tab: SitePage) -> Injection:
        site = tab.site
        inj = Injection(tab.index)

        log.info("%s looking for prompt input…", tab.prefix)
        found = await resolve(tab, site.prompt_candidates, site.decoy_patterns, site.decoy_attributes)
        if found is None:
            log.warning("%s could not find the prompt input", tab.prefix)
            await self._log_editables(tab)
            return inj.fail("prompt_not_found")

        el = found.element
        inj.candidate = str(found.candidate)
        log.info("%s found prompt input: %s", tab.prefix, found.candidate)

        try:
            await el.click(timeout=CLICK_TIMEOUT_S * 1000)
        except PlaywrightError as exc:
            log.warning("%s focus click failed, typing anyway: %s", tab.prefix, exc)
        inj.advance(InjectState.FOCUSED)
        await asyncio.sleep(FOCUS_SETTLE_S)

        try:
            await el.press_sequentially(self.cfg.prompt_text, delay=self.cfg.typing_delay_ms)
        except PlaywrightError as exc:
            log.warning("%s typing failed: %s", tab.prefix, exc)
            return inj.fail("type_failed", str(exc))
        inj.advance(InjectState.TYPED)
        await asyncio.sleep(TYPED_SETTLE_S)

        try:
            if await self._is_editor(el):
                await self._submit_editor(tab, el)
            else:
                await el.press("Enter")
                log.info("%s pressed Enter to submit prompt", tab.prefix)
        except PlaywrightError as exc:
            log.warning("%s submit failed: %s", tab.prefix, exc)
            return inj.fail("submit_failed", str(exc))
        return inj.advance(InjectState.SUBMITTED)

    # ── Submission ────────────────────────────────────────────────────────────

    @staticmethod
    async def _is_editor(el) -> bool:
        return bool(await el.evaluate("(e) => e.isContentEditable"))

    async def _submit_editor(self, tab: SitePage, el) -> None:
        await el.press("Enter")
        log.info("%s pressed Enter to submit prompt", tab.prefix)

        try:
            leftover = (await el.inner_text(timeout=LEFTOVER_READ_TIMEOUT_S * 1000) or "").strip()
        except PlaywrightError as exc:
            log.info("%s editor gone after Enter, treating as submitted (%s)", tab.prefix, exc)
            return
        if not leftover:
            return
        send = await first_visible(tab, tab.site.send_button)
        if send is None:
            log.debug("%s text still in editor and no send button visible", tab.prefix)
            return
        if not await send.element.is_enabled():
            log.info("%s send button is disabled, relying on Enter", tab.prefix)
            return
        await send.element.click(timeout=CLICK_TIMEOUT_S * 1000)
        log.info("%s clicked send button", tab.prefix)

    # ── Diagnostics ───────────────────────────────────────────────────────────

    @staticmethod
    async def _log_editables(tab: SitePage) -> None:
        try:
            editables = await tab.page.locator('[contenteditable="true"]').all()
            log.debug("%s found %d contenteditable elements", tab.prefix, len(editables))
            for i, item in enumerate(editables[:DEBUG_LISTING_LIMIT]):
                log.debug(
                    "%s contenteditable %d: class=%r role=%r visible=%s",
                    tab.prefix,
                    i,
                    await item.get_attribute("class"),
                    await item.get_attribute("role"),
                    await item.is_visible(),
                )
        except PlaywrightError as exc:
            log.debug("%s could not inspect contenteditable elements: %s", tab.prefix, exc)
