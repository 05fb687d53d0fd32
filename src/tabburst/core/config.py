"""
core/config.py — Path constants, run limits and the immutable run config.

Every component receives a :class:`BurstConfig` built once at startup by the
CLI.  Nothing below ``cli/`` reads the process environment.

Usage::

    from tabburst.core.config import BurstConfig, MAX_TABS

    cfg = BurstConfig.from_options(tabs=23, url="https://builder.io/app/projects")
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from urllib.parse import urlparse

from tabburst.core.exception import SetupError

# ── Repository layout ──────────────────────────────────────────────────────────

PACKAGE_DIR: Path = Path(__file__).parent.parent  # …/src/tabburst/
LOCATORS_DIR: Path = PACKAGE_DIR / "page_objects" / "locators"

# Browser profile kept between runs so cached login cookies are reused
USER_DATA_DIR_DEFAULT: str = "./.playwright-user"

# ── Tab limits ─────────────────────────────────────────────────────────────────

TABS_DEFAULT: int = 5
MIN_TABS: int = 1
MAX_TABS: int = 55

PROVISION_BATCH_SIZE: int = 10
PROMPT_BATCH_SIZE: int = 15

# ── Delays (seconds) ───────────────────────────────────────────────────────────

TAB_STAGGER_S: float = 0.1
PROVISION_BATCH_DELAY_S: float = 2.0
PROMPT_BATCH_DELAY_S: float = 1.0
PROMPT_SETTLE_S: float = 5.0
TYPING_DELAY_MS: int = 150

# ── Timeouts (seconds) ─────────────────────────────────────────────────────────

NAVIGATION_TIMEOUT_S: float = 120.0
READY_TIMEOUT_S: float = 120.0
READY_POLL_S: float = 0.5
INTERFACE_TIMEOUT_S: float = 30.0
INTERFACE_POLL_S: float = 1.0
AUTH_WAIT_S: float = 300.0
AUTH_POLL_S: float = 5.0

# ── Small UI settles (seconds) ─────────────────────────────────────────────────

AUTH_SETTLE_S: float = 2.0
FOCUS_SETTLE_S: float = 0.5
TYPED_SETTLE_S: float = 1.0
MENU_SETTLE_S: float = 1.0
OPTION_SETTLE_S: float = 0.5
CLICK_TIMEOUT_S: float = 15.0
# Editor read-back after Enter; the editor may already be gone
LEFTOVER_READ_TIMEOUT_S: float = 2.0

# ── Defaults (overridable via CLI / env) ───────────────────────────────────────

SITE_DEFAULT: str = "builder"
MODEL_DEFAULT: str = "gpt-5-mini"
PROMPT_TEXT_DEFAULT: str = "Generate a modern landing page design"
VIEWPORT: dict = {"width": 1440, "height": 900}

# Chromium flags tuned for many tabs in one browser process
BROWSER_ARGS: tuple[str, ...] = (
    "--no-sandbox",
    "--disable-setuid-sandbox",
    "--disable-dev-shm-usage",
    "--disable-accelerated-2d-canvas",
    "--no-first-run",
    "--no-zygote",
    "--disable-gpu",
    "--disable-background-timer-throttling",
    "--disable-backgrounding-occluded-windows",
    "--disable-renderer-backgrounding",
    "--disable-features=TranslateUI",
    "--disable-ipc-flooding-protection",
)


def clamp_tabs(requested) -> int:
    """Clamp a requested tab count into [MIN_TABS, MAX_TABS].

    Non-numeric input falls back to TABS_DEFAULT; an explicit 0 is clamped
    up to 1.
    """
    try:
        value = int(requested)
    except (TypeError, ValueError):
        value = TABS_DEFAULT
    return max(MIN_TABS, min(value, MAX_TABS))


def validate_url(url: str) -> str:
    """Return url unchanged if it is an absolute http(s) URL, else raise SetupError."""
    parsed = urlparse(url or "")
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise SetupError(f"Invalid target URL: {url!r}", reason="invalid_url")
    return url


@dataclass(frozen=True)
class BurstConfig:
    """Everything a run needs, resolved once from CLI flags and environment."""

    tabs: int = TABS_DEFAULT
    headless: bool = False
    url: str | None = None
    site: str = SITE_DEFAULT
    prompt_selector: str = ""
    prompt_text: str = PROMPT_TEXT_DEFAULT
    user_data_dir: str = USER_DATA_DIR_DEFAULT
    create_branch: bool = False
    model: str = MODEL_DEFAULT
    channel: str | None = None
    auto_close_s: float = 0.0

    provision_batch_size: int = PROVISION_BATCH_SIZE
    prompt_batch_size: int = PROMPT_BATCH_SIZE
    tab_stagger_s: float = TAB_STAGGER_S
    provision_batch_delay_s: float = PROVISION_BATCH_DELAY_S
    prompt_batch_delay_s: float = PROMPT_BATCH_DELAY_S
    prompt_settle_s: float = PROMPT_SETTLE_S
    typing_delay_ms: int = TYPING_DELAY_MS

    navigation_timeout_s: float = NAVIGATION_TIMEOUT_S
    ready_timeout_s: float = READY_TIMEOUT_S
    ready_poll_s: float = READY_POLL_S
    interface_timeout_s: float = INTERFACE_TIMEOUT_S
    interface_poll_s: float = INTERFACE_POLL_S
    auth_wait_s: float = AUTH_WAIT_S
    auth_poll_s: float = AUTH_POLL_S

    browser_args: tuple[str, ...] = field(default=BROWSER_ARGS)

    @classmethod
    def from_options(cls, *, tabs=TABS_DEFAULT, url: str | None = None, model: str = MODEL_DEFAULT, **kwargs) -> BurstConfig:
        """Build a config from raw option values, applying clamping and validation."""
        if url:
            validate_url(url.strip())
            url = url.strip()
        prompt_selector = (kwargs.pop("prompt_selector", "") or "").strip()
        return cls(
            tabs=clamp_tabs(tabs),
            url=url or None,
            model=(model or MODEL_DEFAULT).strip().lower(),
            prompt_selector=prompt_selector,
            **kwargs,
        )

    # ── Derived values ────────────────────────────────────────────────────────

    @property
    def provision_batch(self) -> int:
        return min(self.provision_batch_size, self.tabs)

    @property
    def prompt_batch(self) -> int:
        return min(self.prompt_batch_size, self.tabs)
