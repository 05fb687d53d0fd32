"""SitePage — per-tab page object.

Wraps one Playwright page together with the :class:`Site` locator config it
is driven by.  The page-object layout:

  - every candidate strategy (css / text / role / xpath) has a locator
    factory that returns the live Playwright Locator
  - navigate() loads a URL with the run's navigation timeout
  - the ``[tab n/N]`` prefix is carried so every log line names its tab

Engine modules (readiness, resolver, injector …) take a SitePage rather than
a bare Playwright page.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import TYPE_CHECKING

from tabburst.core.logger import tab_prefix

if TYPE_CHECKING:
    from playwright.async_api import Locator, Page

    from tabburst.page_objects.locators import Site

STRATEGIES = ("css", "text", "role", "xpath")


@dataclass(frozen=True)
class Candidate:
    """One entry of an ordered fallback list: how to find an element."""

    strategy: str
    query: str
    name: str | None = None
    """Accessible-name regex, ``role`` candidates only."""

    @classmethod
    def parse(cls, spec) -> Candidate:
        """Accept a Candidate, a bare CSS string, or a 2/3-tuple from a config module."""
        if isinstance(spec, Candidate):
            return spec
        if isinstance(spec, str):
            return cls("css", spec)
        strategy, query, *rest = spec
        strategy = strategy if strategy in STRATEGIES else "css"
        return cls(strategy, query, rest[0] if rest else None)

    def __str__(self) -> str:
        if self.name:
            return f"{self.strategy}={self.query}[name~/{self.name}/]"
        return f"{self.strategy}={self.query}"


class SitePage:
    """Page object for one tab.

    Usage::

        site = load_site("builder")
        tab = SitePage(page, site, index=3, total=20)
        await tab.navigate(site.start_url, timeout_s=120)
        el = await resolve(tab, site.prompt_candidates, site.decoy_patterns)
    """

    def __init__(self, page: Page | None, site: Site, index: int = 1, total: int | None = None) -> None:
        self.page = page
        self.site = site
        self.index = index
        self.total = total

    @property
    def prefix(self) -> str:
        return tab_prefix(self.index, self.total)

    @property
    def url(self) -> str:
        """Current URL; empty for a tab whose page never opened."""
        return self.page.url if self.page is not None else ""

    # ── Locator factories ─────────────────────────────────────────────────────

    def locate(self, candidate: Candidate) -> Locator:
        """Return the Locator matching every element for a candidate."""
        if candidate.strategy == "text":
            return self._text_locator(candidate.query)
        if candidate.strategy == "role":
            return self._role_locator(candidate.query, candidate.name)
        if candidate.strategy == "xpath":
            return self.page.locator(f"xpath={candidate.query}")
        return self.page.locator(candidate.query)

    def _text_locator(self, text: str) -> Locator:
        return self.page.get_by_text(re.compile(text, re.IGNORECASE))

    def _role_locator(self, role: str, name: str | None) -> Locator:
        if name:
            return self.page.get_by_role(role, name=re.compile(name, re.IGNORECASE))
        return self.page.get_by_role(role)

    # ── Navigation ────────────────────────────────────────────────────────────

    async def navigate(self, url: str, timeout_s: float, wait_until: str = "domcontentloaded") -> None:
        """Load url; raises the Playwright error on failure (callers classify it)."""
        await self.page.goto(url, wait_until=wait_until, timeout=timeout_s * 1000)

    async def wait_for_load(self, timeout_s: float, state: str = "domcontentloaded") -> None:
        await self.page.wait_for_load_state(state, timeout=timeout_s * 1000)
