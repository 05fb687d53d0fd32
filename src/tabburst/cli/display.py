"""Rich display helpers — run header, summary panel, site listing."""

from __future__ import annotations

from typing import TYPE_CHECKING

from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.rule import Rule
from rich.table import Table
from rich.theme import Theme

if TYPE_CHECKING:
    from tabburst.core.config import BurstConfig
    from tabburst.engine.aggregator import Tally
    from tabburst.page_objects.locators import Site

# ── Palette ──────────────────────────────────────────────────────────────────
THEME = Theme(
    {
        "burst.accent": "#E07A2F",
        "burst.accent2": "#F2A65A",
        "burst.accent3": "#8C4A1C",
        "burst.silver": "#A4B4CC",
        "burst.muted": "#5A6278",
        "burst.ok": "#3d9e5a",
        "burst.warn": "#d4a017",
        "burst.err": "#e05555",
    }
)

console = Console(theme=THEME, highlight=False)
err_console = Console(theme=THEME, stderr=True)


# ── Run header ────────────────────────────────────────────────────────────────


def print_config(cfg: BurstConfig, site: Site) -> None:
    """Print the resolved run settings before the browser starts."""
    table = Table(box=box.SIMPLE, show_header=False, padding=(0, 2))
    table.add_column(style="burst.muted", no_wrap=True, width=14)
    table.add_column(style="burst.silver")

    table.add_row("Site", f"{site.title} [burst.muted]({site.name})[/burst.muted]")
    table.add_row("Target", cfg.url or site.start_url)
    table.add_row("Tabs", f"[burst.accent]{cfg.tabs}[/burst.accent]")
    table.add_row("Headless", "yes" if cfg.headless else "no")
    table.add_row("Model", cfg.model)
    table.add_row("Branches", "create per tab" if cfg.create_branch else "off")
    if cfg.prompt_selector:
        table.add_row("Prompt sel.", cfg.prompt_selector)
    table.add_row("Profile dir", cfg.user_data_dir)
    table.add_row("Prompt", cfg.prompt_text)

    console.print(
        Panel(table, title="[burst.accent]tabburst[/burst.accent]", border_style="burst.accent3", padding=(1, 2))
    )


# ── Results ───────────────────────────────────────────────────────────────────


def print_summary(tally: Tally) -> None:
    """Print the final success ratio in a panel."""
    if tally.succeeded == tally.total:
        color, icon = "burst.ok", "✓"
    elif tally.succeeded:
        color, icon = "burst.warn", "◐"
    else:
        color, icon = "burst.err", "✗"

    table = Table(box=box.SIMPLE, show_header=False, padding=(0, 2))
    table.add_column(style="burst.muted", no_wrap=True, width=14)
    table.add_column()
    table.add_row("Succeeded", f"[{color}]{icon}  {tally.succeeded}/{tally.total}[/{color}]")
    table.add_row("Failed", f"[burst.silver]{tally.total - tally.succeeded}[/burst.silver]")
    table.add_row("Success rate", f"[{color}]{tally.percent}%[/{color}]")

    console.print(Panel(table, title=f"[{color}]Final Results[/{color}]", border_style=color, padding=(1, 2)))


def print_sites(sites: list[Site]) -> None:
    if not sites:
        console.print("[burst.muted]  No site locator configs found.[/burst.muted]")
        return

    table = Table(box=box.SIMPLE, show_header=True, header_style="burst.accent3", padding=(0, 2))
    table.add_column("Site", style="burst.accent", no_wrap=True)
    table.add_column("Title", style="burst.silver")
    table.add_column("Start URL", style="burst.muted")
    table.add_column("Prompt cands", justify="right", style="burst.silver")
    table.add_column("Branches", no_wrap=True)

    for site in sites:
        table.add_row(
            site.name,
            site.title,
            site.start_url,
            str(len(site.prompt_candidates)),
            "[burst.ok]yes[/burst.ok]" if site.new_branch else "[burst.muted]no[/burst.muted]",
        )
    console.print(table)


# ── Utility ───────────────────────────────────────────────────────────────────


def ok(message: str) -> None:
    console.print(f"  [burst.ok]✓[/burst.ok]  {message}")


def warn(message: str) -> None:
    console.print(f"  [burst.warn]⚠[/burst.warn]  {message}")


def err(message: str) -> None:
    err_console.print(f"  [burst.err]✗[/burst.err]  [burst.err]{message}[/burst.err]")


def info(message: str) -> None:
    console.print(f"  [burst.muted]·[/burst.muted]  [burst.silver]{message}[/burst.silver]")


def rule(title: str = "") -> None:
    console.print(Rule(title, style="burst.accent3"))
