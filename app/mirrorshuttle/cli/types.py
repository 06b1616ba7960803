"""Shared option types and helpers for CLI commands.

Both modes accept the same options. Only options the user explicitly
passed on the command line override values from the configuration file.
"""

from pathlib import Path
from typing import Annotated, Any

import typer

from mirrorshuttle.core.config import ShuttleOptions

ConfigOption = Annotated[
    Path | None,
    typer.Option("--config", "-c", help="YAML configuration file with any of the options below."),
]
MirrorOption = Annotated[
    str | None,
    typer.Option("--mirror", help="Absolute path to the mirror (staging) structure."),
]
TargetOption = Annotated[
    str | None,
    typer.Option("--target", help="Absolute path to the real (target) structure."),
]
ExcludeOption = Annotated[
    list[str] | None,
    typer.Option("--exclude", help="Absolute path to exclude from operations. Repeatable."),
]
DirectOption = Annotated[
    bool,
    typer.Option(
        "--direct/--no-direct",
        help="Attempt atomic renames, falling back to copy and remove.",
    ),
]
VerifyOption = Annotated[
    bool,
    typer.Option(
        "--verify/--no-verify",
        help="Re-read moved files and compare against the source hash.",
    ),
]
SkipEmptyOption = Annotated[
    bool,
    typer.Option(
        "--skip-empty/--no-skip-empty",
        help="Only create target directories that receive files (move).",
    ),
]
RemoveEmptyOption = Annotated[
    bool,
    typer.Option(
        "--remove-empty/--no-remove-empty",
        help="Remove empty mirror directories missing on the target (move, with --skip-empty).",
    ),
]
SkipFailedOption = Annotated[
    bool,
    typer.Option(
        "--skip-failed/--no-skip-failed",
        help="Skip failed elements and continue; exits with a partial failure code.",
    ),
]
SlowModeOption = Annotated[
    bool,
    typer.Option(
        "--slow-mode/--no-slow-mode",
        help="Pause 1s after every 50 created directories (init).",
    ),
]
InitDepthOption = Annotated[
    int,
    typer.Option("--init-depth", help="Maximum depth mirrored (init); negative is unlimited."),
]
DryRunOption = Annotated[
    bool,
    typer.Option(
        "--dry-run/--no-dry-run",
        help="Preview operations without filesystem changes.",
    ),
]
LogLevelOption = Annotated[
    str,
    typer.Option("--log-level", help="Log verbosity: debug, info, warn or error."),
]
JsonOption = Annotated[
    bool,
    typer.Option("--json/--no-json", help="Emit logs as JSON lines on stderr."),
]


def collect_overrides(ctx: typer.Context) -> dict[str, Any]:
    """Collect option values the user explicitly passed.

    Args:
        ctx: Context of the invoked command.

    Returns:
        Mapping of option field name to value, without defaults.
    """
    overrides: dict[str, Any] = {}
    for name, value in ctx.params.items():
        if name not in ShuttleOptions.model_fields:
            continue
        source = ctx.get_parameter_source(name)
        # Compared by name; typer may bundle its own click
        if source is None or source.name == "DEFAULT":
            continue
        overrides[name] = value
    return overrides
