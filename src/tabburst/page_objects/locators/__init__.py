"""
page_objects/locators — Site locator configs with auto-discovery.

Each ``<name>_config.py`` module in this package describes one target site as
plain data (URLs, readiness checks, ordered candidate lists).  Call
:func:`load_site` with the site name (``"builder"`` for
``builder_config.py``) to get a :class:`Site`.

Adding a new site
-----------------
1. Copy ``builder_config.py`` to ``<name>_config.py``.
2. Edit the selectors.
3. That's it — ``tabburst run --site <name>`` picks it up.
"""

from __future__ import annotations

import importlib
import pkgutil
import types
from dataclasses import dataclass, field, replace

from tabburst.core.config import LOCATORS_DIR
from tabburst.core.exception import UnknownSiteError
from tabburst.page_objects.page import Candidate

_SUFFIX = "_config"
_SITES: dict[str, Site] = {}


@dataclass(frozen=True)
class Site:
    """Data-only description of a target site, loaded from a locator config module."""

    name: str
    title: str
    host: str
    start_url: str
    fallback_url: str
    ready_checks: tuple[str, ...]
    interface_checks: tuple[str, ...]
    prompt_candidates: tuple[Candidate, ...]
    send_button: tuple[Candidate, ...] = ()
    decoy_patterns: tuple[str, ...] = ()
    decoy_attributes: tuple[str, ...] = ("placeholder",)
    login_indicators: tuple[Candidate, ...] = ()
    auth_indicators: tuple[Candidate, ...] = ()
    login_url_markers: tuple[str, ...] = ("login", "signin")
    model_dropdown: tuple[Candidate, ...] = ()
    model_menu_item: str = 'li[role="menuitem"]'
    model_options: dict = field(default_factory=dict)
    model_fallback: str = ""
    new_branch: tuple[Candidate, ...] = ()
    branch_name_input: tuple[Candidate, ...] = ()
    branch_confirm: tuple[Candidate, ...] = ()

    @classmethod
    def from_module(cls, name: str, cfg: types.ModuleType) -> Site:
        def cands(attr: str) -> tuple[Candidate, ...]:
            return tuple(Candidate.parse(c) for c in getattr(cfg, attr, ()))

        def strs(attr: str, default=()) -> tuple[str, ...]:
            return tuple(getattr(cfg, attr, default))

        return cls(
            name=name,
            title=getattr(cfg, "title", name),
            host=getattr(cfg, "host", ""),
            start_url=cfg.startUrl,
            fallback_url=getattr(cfg, "fallbackUrl", cfg.startUrl),
            ready_checks=strs("ready_checks"),
            interface_checks=strs("interface_checks"),
            prompt_candidates=cands("prompt_candidates"),
            send_button=cands("send_button"),
            decoy_patterns=tuple(p.lower() for p in getattr(cfg, "decoy_patterns", ())),
            decoy_attributes=strs("decoy_attributes", ("placeholder",)),
            login_indicators=cands("login_indicators"),
            auth_indicators=cands("auth_indicators"),
            login_url_markers=strs("login_url_markers", ("login", "signin")),
            model_dropdown=cands("model_dropdown"),
            model_menu_item=getattr(cfg, "model_menu_item", 'li[role="menuitem"]'),
            model_options=dict(getattr(cfg, "model_options", {})),
            model_fallback=getattr(cfg, "model_fallback", ""),
            new_branch=cands("new_branch"),
            branch_name_input=cands("branch_name_input"),
            branch_confirm=cands("branch_confirm"),
        )

    def with_prompt_override(self, selector: str) -> Site:
        """Return a copy whose prompt candidates start with a user-supplied CSS selector."""
        if not selector:
            return self
        head = Candidate("css", selector)
        rest = tuple(c for c in self.prompt_candidates if c != head)
        return replace(self, prompt_candidates=(head, *rest))


def available_sites() -> list[str]:
    """Return the names of every ``*_config`` module in this package."""
    return sorted(
        name[: -len(_SUFFIX)]
        for _finder, name, is_pkg in pkgutil.iter_modules([str(LOCATORS_DIR)])
        if not is_pkg and name.endswith(_SUFFIX)
    )


def load_site(name: str) -> Site:
    """Load (and cache) the Site for ``name``; raise UnknownSiteError if missing."""
    if name in _SITES:
        return _SITES[name]
    if name not in available_sites():
        raise UnknownSiteError(name, available_sites())
    mod = importlib.import_module(f"{__name__}.{name}{_SUFFIX}")
    site = Site.from_module(name, mod)
    _SITES[name] = site
    return site
