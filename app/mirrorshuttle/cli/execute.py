"""Shared execution flow of the init and move commands."""

import logging
from pathlib import Path
from typing import Any

import typer

from mirrorshuttle import __version__
from mirrorshuttle.cli.display import print_banner, print_configuration, print_summary
from mirrorshuttle.cli.types import collect_overrides
from mirrorshuttle.core.cancel import CancelToken
from mirrorshuttle.core.config import (
    ShuttleOptions,
    load_config_file,
    merge_options,
    validate_options,
)
from mirrorshuttle.core.errors import ConfigError
from mirrorshuttle.core.exit_codes import ExitCode
from mirrorshuttle.core.log import log_event, setup_logging
from mirrorshuttle.core.runner import run_cancellable
from mirrorshuttle.core.shuttle import Mode, RunReport, run_mode
from mirrorshuttle.filesystem.provider import FileSystem
from mirrorshuttle.utils.formatting import print_error

logger = logging.getLogger(__name__)


def resolve_options(config: Path | None, overrides: dict[str, Any]) -> ShuttleOptions:
    """Build the effective options from the config file and CLI overrides.

    Args:
        config: Optional YAML configuration file.
        overrides: Explicitly passed command-line values.

    Returns:
        Validated and normalized options.

    Raises:
        ConfigError: If the file or the merged options are invalid.
    """
    base = load_config_file(config) if config is not None else ShuttleOptions()
    return validate_options(merge_options(base, overrides))


def execute(
    ctx: typer.Context,
    mode: Mode,
    config: Path | None,
    fs: FileSystem | None = None,
) -> None:
    """Run a mode from a command callback and exit with its code.

    Args:
        ctx: Context of the invoked command.
        mode: Mode to run.
        config: Optional YAML configuration file.
        fs: Filesystem override; the real disk if None.

    Raises:
        typer.Exit: Always, carrying the run's exit code.
    """
    ctx.ensure_object(dict)
    quiet = bool(ctx.obj.get("quiet", False))

    if not quiet:
        print_banner(__version__)

    try:
        options = resolve_options(config, collect_overrides(ctx))
    except ConfigError as e:
        print_error(f"failed to parse configuration: {e}")
        raise typer.Exit(code=ExitCode.CONFIG_FAILURE) from e

    if not quiet:
        print_configuration(mode, options)

    setup_logging(options.log_level, options.json_output)

    token = CancelToken()
    reports: list[RunReport] = []

    def operation() -> ExitCode:
        report = run_mode(mode, options, fs=fs, cancel=token)
        reports.append(report)
        return report.exit_code

    code = run_cancellable(operation, token, op=mode.value)

    if reports and not quiet:
        print_summary(reports[0], dry_run=options.dry_run)

    log_event(logger, logging.INFO, "program exited", op=mode.value, code=int(code))
    raise typer.Exit(code=int(code))
