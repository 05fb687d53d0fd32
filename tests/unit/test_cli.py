"""
test_cli.py — Unit tests for cli/main.py

The run itself is replaced by a stub so only option parsing, environment
variables, exit codes and output are exercised.
"""

import logging

import pytest
from typer.testing import CliRunner

from tabburst import __version__
from tabburst.cli.main import app
from tabburst.core.exception import SetupError
from tabburst.engine import runner
from tabburst.engine.aggregator import Tally

cli = CliRunner()


@pytest.fixture
def fake_run(monkeypatch):
    """Replace runner.run; the list collects every BurstConfig it was called with."""
    calls = []

    async def _run(cfg, report=None):
        calls.append(cfg)
        logging.getLogger("tabburst.engine.runner").info("stub run for %d tabs", cfg.tabs)
        tally = Tally(total=cfg.tabs).add([True] + [False] * (cfg.tabs - 1))
        if report:
            report(tally)
        return tally

    monkeypatch.setattr(runner, "run", _run)
    return calls


def _failing_run(monkeypatch, exc):
    async def _run(cfg, report=None):
        raise exc

    monkeypatch.setattr(runner, "run", _run)


# ── Root ──────────────────────────────────────────────────────────────────────


class TestRoot:
    def test_version(self):
        result = cli.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert __version__ in result.output

    def test_no_command_prints_help(self):
        result = cli.invoke(app, [])
        assert result.exit_code == 0
        assert "run" in result.output
        assert "sites" in result.output

    def test_sites_lists_builder(self):
        result = cli.invoke(app, ["sites"])
        assert result.exit_code == 0
        assert "builder" in result.output


# ── run ───────────────────────────────────────────────────────────────────────


class TestRunCommand:
    def test_success_exits_zero_with_summary(self, fake_run, tmp_path):
        result = cli.invoke(app, ["run", "--tabs", "3", "--user-data-dir", str(tmp_path)])
        assert result.exit_code == 0, result.output
        assert "1/3 tabs (33% success rate)" in result.output

    def test_tabs_are_clamped(self, fake_run, tmp_path):
        cli.invoke(app, ["run", "--tabs", "1000", "--user-data-dir", str(tmp_path)])
        assert fake_run[0].tabs == 55

    @pytest.mark.parametrize("raw, expected", [("abc", 5), ("", 5), ("0", 1), ("7", 7)])
    def test_non_numeric_tabs_fall_back(self, fake_run, tmp_path, raw, expected):
        result = cli.invoke(app, ["run", "--tabs", raw, "--user-data-dir", str(tmp_path)])
        assert result.exit_code == 0, result.output
        assert fake_run[0].tabs == expected

    def test_options_reach_config(self, fake_run, tmp_path):
        result = cli.invoke(
            app,
            [
                "run",
                "-n", "2",
                "--headless",
                "--url", "https://example.test/app",
                "--model", "GPT-5",
                "--prompt-selector", "#p",
                "--channel", "chrome",
                "--user-data-dir", str(tmp_path),
            ],
        )
        assert result.exit_code == 0, result.output
        cfg = fake_run[0]
        assert cfg.headless is True
        assert cfg.url == "https://example.test/app"
        assert cfg.model == "gpt-5"
        assert cfg.prompt_selector == "#p"
        assert cfg.channel == "chrome"
        assert cfg.user_data_dir == str(tmp_path)

    def test_environment_variables(self, fake_run, tmp_path):
        env = {"CREATE_BRANCH": "1", "AUTO_CLOSE_SECONDS": "30", "PROMPT_TEXT": "build a blog"}
        result = cli.invoke(app, ["run", "--user-data-dir", str(tmp_path)], env=env)
        assert result.exit_code == 0, result.output
        cfg = fake_run[0]
        assert cfg.create_branch is True
        assert cfg.auto_close_s == 30.0
        assert cfg.prompt_text == "build a blog"

    def test_defaults(self, fake_run, tmp_path):
        cli.invoke(app, ["run", "--user-data-dir", str(tmp_path)], env={"CREATE_BRANCH": None})
        cfg = fake_run[0]
        assert cfg.tabs == 5
        assert cfg.create_branch is False
        assert cfg.channel is None
        assert cfg.url is None

    def test_invalid_url_exits_one(self, fake_run):
        result = cli.invoke(app, ["run", "--url", "builder.io"])
        assert result.exit_code == 1
        assert "Invalid target URL" in result.output
        assert fake_run == []

    def test_unknown_site_exits_one(self, fake_run):
        result = cli.invoke(app, ["run", "--site", "nope"])
        assert result.exit_code == 1
        assert "Unknown site" in result.output
        assert fake_run == []

    def test_setup_error_exits_one(self, monkeypatch, tmp_path):
        _failing_run(monkeypatch, SetupError("profile locked", reason="browser_launch_failed"))
        result = cli.invoke(app, ["run", "--user-data-dir", str(tmp_path)])
        assert result.exit_code == 1
        assert "profile locked" in result.output

    def test_headless_login_hint(self, monkeypatch, tmp_path):
        _failing_run(monkeypatch, SetupError("login needed", reason="headless_login_required"))
        result = cli.invoke(app, ["run", "--headless", "--user-data-dir", str(tmp_path)])
        assert result.exit_code == 1
        assert "without --headless" in result.output

    def test_log_file_receives_log_lines(self, fake_run, tmp_path):
        log_file = tmp_path / "logs" / "run.log"
        result = cli.invoke(app, ["run", "-n", "4", "--user-data-dir", str(tmp_path), "--log-file", str(log_file)])
        assert result.exit_code == 0, result.output
        assert "stub run for 4 tabs" in log_file.read_text()
