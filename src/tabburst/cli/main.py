"""
tabburst — CLI entry point.

Usage:
  tabburst run --tabs 1                       # first run: log in in the browser window
  tabburst run --tabs 5 --headless            # later runs reuse the saved profile
  tabburst run --tabs 10 --model gpt-5 --headless
  tabburst run --tabs 20 --create-branch --url https://builder.io/app/projects/<id>
  tabburst sites                              # list site locator configs

Environment:
  PROMPT_TEXT          text typed into every tab
  CREATE_BRANCH        1/true to create a workspace branch per tab
  AUTO_CLOSE_SECONDS   close the browser N seconds after the run (0 = stay open)
"""

from __future__ import annotations

import asyncio
from pathlib import Path

import typer

from tabburst.core import logger
from tabburst.core.config import (
    MAX_TABS,
    MODEL_DEFAULT,
    PROMPT_TEXT_DEFAULT,
    SITE_DEFAULT,
    TABS_DEFAULT,
    USER_DATA_DIR_DEFAULT,
    BurstConfig,
)
from tabburst.core.exception import SetupError
from tabburst.engine import runner
from tabburst.page_objects.locators import available_sites, load_site

from . import __version__
from .display import console, err, info, ok, print_config, print_sites, print_summary, rule, warn

# ── App ───────────────────────────────────────────────────────────────────────

app = typer.Typer(
    name="tabburst",
    help="Browser-tab load generator for prompt-driven web apps",
    add_completion=False,
    rich_markup_mode="rich",
    no_args_is_help=False,
    invoke_without_command=True,
)


@app.callback(invoke_without_command=True)
def root(
    ctx: typer.Context,
    version: bool = typer.Option(False, "--version", "-V", help="Print version and exit", is_eager=True),
) -> None:
    """[bold]tabburst[/bold] — open many tabs, submit a prompt in each, report the success rate."""
    if version:
        console.print(f"tabburst [bold]v{__version__}[/bold]")
        raise typer.Exit()

    if ctx.invoked_subcommand is None:
        typer.echo(ctx.get_help())
        raise typer.Exit()


# ── Subcommands ───────────────────────────────────────────────────────────────


@app.command()
def run(
    tabs: str = typer.Option(
        str(TABS_DEFAULT), "--tabs", "-n", help=f"Number of tabs (clamped to 1..{MAX_TABS}; non-numeric means {TABS_DEFAULT})"
    ),
    headless: bool = typer.Option(False, "--headless", help="Run headless (requires a previous login)"),
    url: str = typer.Option("", "--url", "-u", help="Target URL (default: the site's start page)"),
    site: str = typer.Option(SITE_DEFAULT, "--site", "-s", help="Site locator config to use"),
    model: str = typer.Option(MODEL_DEFAULT, "--model", "-m", help="AI model to select in each tab"),
    prompt_selector: str = typer.Option("", "--prompt-selector", help="CSS selector tried first for the prompt"),
    prompt_text: str = typer.Option(PROMPT_TEXT_DEFAULT, "--prompt-text", envvar="PROMPT_TEXT", help="Prompt to type"),
    user_data_dir: Path = typer.Option(
        USER_DATA_DIR_DEFAULT, "--user-data-dir", help="Browser profile directory (keeps the login)"
    ),
    create_branch: bool = typer.Option(
        False, "--create-branch/--no-create-branch", envvar="CREATE_BRANCH", help="Create a workspace branch per tab"
    ),
    auto_close: float = typer.Option(
        0.0, "--auto-close", envvar="AUTO_CLOSE_SECONDS", help="Close the browser after N seconds (0 = stay open)"
    ),
    channel: str = typer.Option("", "--channel", help="Browser channel, e.g. 'chrome' (default: bundled Chromium)"),
    log_file: Path | None = typer.Option(None, "--log-file", help="Also write log lines to this file"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging (selector decisions)"),
) -> None:
    """
    Open [bold]--tabs[/bold] tabs against the target, submit the prompt in each,
    and print the success rate.

    Exits 0 when the run completes (even if some tabs failed) and 1 when the
    run cannot start.
    """
    logger.configure(verbose)
    try:
        cfg = BurstConfig.from_options(
            tabs=tabs,
            headless=headless,
            url=url,
            site=site,
            model=model,
            prompt_selector=prompt_selector,
            prompt_text=prompt_text,
            user_data_dir=str(user_data_dir),
            create_branch=create_branch,
            auto_close_s=max(0.0, auto_close),
            channel=channel or None,
        )
        site_cfg = load_site(cfg.site)
    except SetupError as exc:
        err(str(exc))
        raise typer.Exit(1)

    print_config(cfg, site_cfg)
    log_fh = _open_log_file(log_file)
    stream_id = logger.LogStream.Register(log_fh) if log_fh else None
    try:
        asyncio.run(runner.run(cfg, report=_report))
    except SetupError as exc:
        err(str(exc))
        if exc.reason == "headless_login_required":
            info("First run without --headless to log in:  [bold]tabburst run --tabs 1[/bold]")
        raise typer.Exit(1)
    except KeyboardInterrupt:
        console.print()
        info("Interrupted, browser closed.")
    finally:
        if stream_id is not None:
            logger.LogStream.Unregister(stream_id)
            log_fh.close()


@app.command()
def sites() -> None:
    """List the site locator configs available to [bold]--site[/bold]."""
    print_sites([load_site(name) for name in available_sites()])


# ── Helpers ───────────────────────────────────────────────────────────────────


def _report(tally) -> None:
    rule("FINAL RESULTS")
    print_summary(tally)
    ok(tally.summary_line())
    if tally.failed:
        warn(f"{tally.failed} tab(s) did not submit a prompt; see the log for reasons")


def _open_log_file(path: Path | None):
    if path is None:
        return None
    path.parent.mkdir(parents=True, exist_ok=True)
    return path.open("a", encoding="utf-8")


# ── Entry ─────────────────────────────────────────────────────────────────────


def main() -> None:
    app()


if __name__ == "__main__":
    main()
