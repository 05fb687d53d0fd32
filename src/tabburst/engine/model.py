"""engine/model.py — Pick the AI model from the site's model dropdown.

Never fatal: when the picker or the option cannot be found the tab keeps the
site's default model.
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

from playwright.async_api import Error as PlaywrightError

from tabburst.core.config import MENU_SETTLE_S, OPTION_SETTLE_S
from tabburst.engine.resolver import first_visible

if TYPE_CHECKING:
    from tabburst.page_objects.page import SitePage

log = logging.getLogger(__name__)

DEBUG_LISTING_LIMIT = 5


def model_label(site, model: str) -> str | None:
    """Map a CLI model name to the menu text, falling back to the site default."""
    if model in site.model_options:
        return site.model_options[model]
    return site.model_options.get(site.model_fallback)


async def find_option(tab: SitePage, label: str):
    """Return the menu item whose first text line equals ``label`` (case-insensitive).

    "GPT-5" must not pick "GPT-5 Mini", so prefix matches are only used when no
    exact match exists.
    """
    items = await tab.page.locator(tab.site.model_menu_item).all()
    wanted = label.strip().lower()
    prefix_hit = None
    for item in items:
        if not await item.is_visible():
            continue
        text = (await item.inner_text() or "").strip()
        first_line = text.split("\n")[0].strip().lower()
        if first_line == wanted:
            return item
        if prefix_hit is None and first_line.startswith(wanted):
            prefix_hit = item
    return prefix_hit


async def select_model(tab: SitePage, model: str) -> bool:
    site = tab.site
    if not site.model_dropdown:
        return False
    label = model_label(site, model)
    if model not in site.model_options:
        log.info("%s unknown model %r, using %s as fallback", tab.prefix, model, site.model_fallback)
    if label is None:
        return False

    log.info("%s selecting AI model: %s", tab.prefix, model)
    try:
        dropdown = await first_visible(tab, site.model_dropdown)
        if dropdown is None:
            log.info("%s model dropdown not found with any selector", tab.prefix)
            await _log_buttons(tab)
            return False

        log.debug("%s found model dropdown with %s", tab.prefix, dropdown.candidate)
        await dropdown.element.click()
        await asyncio.sleep(MENU_SETTLE_S)

        option = await find_option(tab, label)
        if option is None:
            log.info("%s model option not found: %s", tab.prefix, label)
            await _log_options(tab)
            return False

        await option.click()
        await asyncio.sleep(OPTION_SETTLE_S)
        log.info("%s selected model: %s", tab.prefix, label)
        return True
    except PlaywrightError as exc:
        log.info("%s error selecting model: %s", tab.prefix, exc)
        return False


async def _log_options(tab: SitePage) -> None:
    try:
        items = await tab.page.locator(tab.site.model_menu_item).all()
        for i, item in enumerate(items[:DEBUG_LISTING_LIMIT]):
            log.debug("%s option %d: %r", tab.prefix, i, (await item.inner_text() or "").strip())
    except PlaywrightError as exc:
        log.debug("%s could not list model options: %s", tab.prefix, exc)


async def _log_buttons(tab: SitePage) -> None:
    try:
        buttons = await tab.page.locator("button").all()
        log.debug("%s found %d buttons on page", tab.prefix, len(buttons))
        for i, button in enumerate(buttons[:DEBUG_LISTING_LIMIT]):
            title = await button.get_attribute("title")
            text = (await button.inner_text() or "").strip()
            log.debug("%s button %d: title=%r text=%r", tab.prefix, i, title, text)
    except PlaywrightError as exc:
        log.debug("%s could not inspect buttons: %s", tab.prefix, exc)
