"""Move command implementation.

Moves files staged in the mirror into the matching target locations.
"""

import typer

from mirrorshuttle.cli.execute import execute
from mirrorshuttle.cli.types import (
    ConfigOption,
    DirectOption,
    DryRunOption,
    ExcludeOption,
    InitDepthOption,
    JsonOption,
    LogLevelOption,
    MirrorOption,
    RemoveEmptyOption,
    SkipEmptyOption,
    SkipFailedOption,
    SlowModeOption,
    TargetOption,
    VerifyOption,
)
from mirrorshuttle.core.log import DEFAULT_LOG_LEVEL
from mirrorshuttle.core.shuttle import Mode

app = typer.Typer(
    help="Move staged files from the mirror into the target.",
    invoke_without_command=True,
)


@app.callback(invoke_without_command=True)
def move_files(
    ctx: typer.Context,
    config: ConfigOption = None,
    mirror: MirrorOption = None,
    target: TargetOption = None,
    exclude: ExcludeOption = None,
    direct: DirectOption = False,
    verify: VerifyOption = False,
    skip_empty: SkipEmptyOption = False,
    remove_empty: RemoveEmptyOption = False,
    skip_failed: SkipFailedOption = False,
    slow_mode: SlowModeOption = False,
    init_depth: InitDepthOption = -1,
    dry_run: DryRunOption = False,
    log_level: LogLevelOption = DEFAULT_LOG_LEVEL,
    json_output: JsonOption = False,
) -> None:
    """Move staged files from the mirror into the target.

    Files already present on the target are never overwritten; they stay
    in the mirror and the run exits with code 4.

    Examples:
        mirrorshuttle move --mirror /mnt/user/incoming --target /mnt/user
        mirrorshuttle move -c config.yaml --verify --skip-failed
        mirrorshuttle move -c config.yaml --dry-run
    """
    if ctx.invoked_subcommand is not None:
        return

    execute(ctx, Mode.MOVE, config)
