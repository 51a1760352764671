"""Tests for CLI error handling edge cases.

Verifies graceful handling of:
    - A settings file that does not exist.
    - A settings file with invalid values.
    - Invalid settings from the environment.
    - Unknown subcommands.
"""

from __future__ import annotations

from pathlib import Path

import pytest
from click.testing import CliRunner

from quarry.cli.main import cli


@pytest.fixture
def runner() -> CliRunner:
    """Create a Click CliRunner for invoking commands."""
    return CliRunner()


class TestConfigErrors:
    """Tests for settings errors at the group level."""

    def test_missing_config_file(self, runner: CliRunner) -> None:
        """Click's exists=True on the path catches this before our code."""
        result = runner.invoke(cli, ["--config", "/nonexistent/quarry.yaml", "graph"])
        assert result.exit_code == 2

    def test_invalid_config_value(self, runner: CliRunner, tmp_path: Path) -> None:
        config = tmp_path / "quarry.yaml"
        config.write_text("log_level: chatty\n")
        result = runner.invoke(cli, ["--config", str(config), "graph"])
        assert result.exit_code == 2
        assert "log_level" in result.output

    def test_invalid_environment(self, runner: CliRunner) -> None:
        result = runner.invoke(cli, ["graph"], env={"QUARRY_TIMEOUT": "never"})
        assert result.exit_code == 2
        assert "timeout" in result.output


class TestUsageErrors:
    """Tests for click usage errors."""

    def test_unknown_command(self, runner: CliRunner) -> None:
        result = runner.invoke(cli, ["explode"])
        assert result.exit_code == 2

    def test_verbose_flag_accepted(self, runner: CliRunner) -> None:
        result = runner.invoke(cli, ["-vv", "graph", "--format", "json"])
        assert result.exit_code == 0
