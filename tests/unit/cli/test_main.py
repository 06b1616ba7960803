"""Unit tests for the root CLI application and console script."""

import sys
from pathlib import Path
from unittest.mock import patch

import pytest
from mirrorshuttle import __version__
from mirrorshuttle.cli.main import app, run
from typer.testing import CliRunner

runner = CliRunner()


class TestApp:
    """Tests for the root Typer application."""

    def test_version(self) -> None:
        """--version prints the version and exits."""
        result = runner.invoke(app, ["--version"])

        assert result.exit_code == 0
        assert __version__ in result.stdout

    def test_help_lists_commands(self) -> None:
        """The help text lists both modes."""
        result = runner.invoke(app, ["--help"])

        assert result.exit_code == 0
        assert "init" in result.stdout
        assert "move" in result.stdout


class TestRun:
    """Tests for the console script entry point."""

    def test_usage_error_exits_with_config_failure(self) -> None:
        """Unknown options exit with code 5."""
        with (
            patch.object(sys, "argv", ["mirrorshuttle", "move", "--bogus"]),
            pytest.raises(SystemExit) as exc_info,
        ):
            run()

        assert exc_info.value.code == 5

    def test_bad_value_exits_with_config_failure(self) -> None:
        """Option values of the wrong type exit with code 5."""
        argv = ["mirrorshuttle", "init", "--init-depth", "deep"]

        with patch.object(sys, "argv", argv), pytest.raises(SystemExit) as exc_info:
            run()

        assert exc_info.value.code == 5

    def test_bare_invocation_shows_help(self, capsys: pytest.CaptureFixture[str]) -> None:
        """Running without arguments prints the help and exits with code 0."""
        with patch.object(sys, "argv", ["mirrorshuttle"]), pytest.raises(SystemExit) as exc_info:
            run()

        assert exc_info.value.code == 0
        captured = capsys.readouterr()
        assert "move" in captured.out + captured.err

    def test_config_file_alone(self, roots: tuple[Path, Path], tmp_path: Path) -> None:
        """Options left at their defaults do not override the config file."""
        mirror, target = roots
        (mirror / "file.txt").write_text("content")
        config = tmp_path / "config.yaml"
        config.write_text(f"mirror: {mirror}\ntarget: {target}\n")
        argv = ["mirrorshuttle", "-q", "move", "--config", str(config)]

        with patch.object(sys, "argv", argv), pytest.raises(SystemExit) as exc_info:
            run()

        assert exc_info.value.code == 0
        assert (target / "file.txt").read_text() == "content"

    def test_successful_run(self, roots: tuple[Path, Path]) -> None:
        """A successful move exits with code 0."""
        mirror, target = roots
        (mirror / "file.txt").write_text("content")
        argv = ["mirrorshuttle", "-q", "move", "--mirror", str(mirror), "--target", str(target)]

        with patch.object(sys, "argv", argv), pytest.raises(SystemExit) as exc_info:
            run()

        assert exc_info.value.code == 0
        assert (target / "file.txt").read_text() == "content"

    def test_run_propagates_mode_exit_code(self, roots: tuple[Path, Path]) -> None:
        """Mode exit codes reach the process status."""
        mirror, target = roots
        (mirror / "file.txt").write_text("new")
        (target / "file.txt").write_text("old")
        argv = ["mirrorshuttle", "-q", "move", "--mirror", str(mirror), "--target", str(target)]

        with patch.object(sys, "argv", argv), pytest.raises(SystemExit) as exc_info:
            run()

        assert exc_info.value.code == 4
