"""Init command implementation.

Recreates the target's directory structure (without files) as the mirror.
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
    help="Mirror the target's directory structure into the mirror.",
    invoke_without_command=True,
)


@app.callback(invoke_without_command=True)
def init_mirror(
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
    """Mirror the target's directory structure into the mirror.

    An existing mirror is removed and recreated, but only if it contains
    no files. Otherwise the run fails with exit code 3 and every found file
    is logged.

    Examples:
        mirrorshuttle init --mirror /mnt/user/incoming --target /mnt/user
        mirrorshuttle init -c config.yaml --init-depth 2
        mirrorshuttle init -c config.yaml --dry-run
    """
    if ctx.invoked_subcommand is not None:
        return

    execute(ctx, Mode.INIT, config)
