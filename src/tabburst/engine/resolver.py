"""
engine/resolver.py — Ordered fallback search for "the right element".

Candidates are tried strictly in list order; within a candidate every match
is inspected in DOM order.  The first element that is visible and is not a
decoy wins.  There is no scoring.

A decoy is an element that fits a candidate's shape but is meant for
something else, e.g. the branch-name input matched by a generic text-input
query.  Decoys are recognised by searching a few attributes (placeholder,
aria-label, …) for configured patterns.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from playwright.async_api import Error as PlaywrightError

if TYPE_CHECKING:
    from playwright.async_api import Locator

    from tabburst.page_objects.page import Candidate, SitePage

log = logging.getLogger(__name__)

DEFAULT_DECOY_ATTRIBUTES = ("placeholder",)


@dataclass(frozen=True)
class Resolved:
    element: Locator
    candidate: Candidate
    rank: int


async def is_decoy(element: Locator, patterns, attributes=DEFAULT_DECOY_ATTRIBUTES) -> str | None:
    """Return the attribute that marks element as a decoy, or None."""
    for attr in attributes:
        value = await element.get_attribute(attr)
        if not value:
            continue
        lowered = value.lower()
        if any(p in lowered for p in patterns):
            return attr
    return None


async def resolve(
    tab: SitePage,
    candidates,
    decoys=(),
    attributes=DEFAULT_DECOY_ATTRIBUTES,
) -> Resolved | None:
    """Return the first visible, non-decoy match across ``candidates``; None if nothing fits."""
    for rank, candidate in enumerate(candidates):
        try:
            matches = await tab.locate(candidate).all()
        except PlaywrightError as exc:
            log.debug("%s candidate %s unusable: %s", tab.prefix, candidate, exc)
            continue

        for element in matches:
            try:
                if not await element.is_visible():
                    continue
                if decoys:
                    attr = await is_decoy(element, decoys, attributes)
                    if attr:
                        log.debug("%s skipping decoy for %s (%s matches)", tab.prefix, candidate, attr)
                        continue
            except PlaywrightError as exc:
                log.debug("%s could not inspect match for %s: %s", tab.prefix, candidate, exc)
                continue
            log.debug("%s resolved %s (rank %d)", tab.prefix, candidate, rank)
            return Resolved(element, candidate, rank)
    return None


async def first_visible(tab: SitePage, candidates) -> Resolved | None:
    """Resolve without a decoy filter — presence checks such as login indicators."""
    return await resolve(tab, candidates)
