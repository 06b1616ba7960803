"""Main CLI application entry point.

Defines the Typer application, global options and the console script.
"""

import sys
from typing import Annotated

import typer

from mirrorshuttle import __version__
from mirrorshuttle.cli.commands import init, move
from mirrorshuttle.core.exit_codes import ExitCode

# Create main Typer app
app = typer.Typer(
    name="mirrorshuttle",
    help="Stage files in a mirror structure and promote them into a protected target.",
    no_args_is_help=True,
    rich_markup_mode="rich",
    context_settings={"help_option_names": ["-h", "--help"]},
)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"mirrorshuttle version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    ctx: typer.Context,
    version: Annotated[
        bool | None,
        typer.Option(
            "--version",
            "-V",
            callback=version_callback,
            is_eager=True,
            help="Show version and exit.",
        ),
    ] = None,
    quiet: Annotated[
        bool,
        typer.Option(
            "--quiet",
            "-q",
            help="Suppress banner, configuration and summary output.",
        ),
    ] = False,
) -> None:
    """mirrorshuttle - Keep your organization, ditch the ransomware.

    Run 'init' to mirror the target's directories into a writable staging
    area, then 'move' to promote the files written there into the target.
    """
    # Store options in context for subcommands
    ctx.ensure_object(dict)
    ctx.obj["quiet"] = quiet


# Register commands
app.add_typer(init.app, name="init")
app.add_typer(move.app, name="move")


def _is_usage_error(error: Exception) -> bool:
    # Matched by name; typer may raise errors from its own bundled click
    return any(cls.__name__ == "UsageError" for cls in type(error).__mro__)


def run() -> None:
    """Console script entry point.

    Usage errors exit with the configuration failure code instead of
    click's default of 2, which is reserved for partial failures. A bare
    invocation prints the help and exits successfully.
    """
    try:
        result = app(standalone_mode=False)
    except typer.Abort:
        sys.exit(ExitCode.FAILURE)
    except Exception as e:
        if not _is_usage_error(e):
            raise
        e.show()  # type: ignore[attr-defined]
        if type(e).__name__ == "NoArgsIsHelpError":
            sys.exit(ExitCode.SUCCESS)
        sys.exit(ExitCode.CONFIG_FAILURE)
    sys.exit(result if isinstance(result, int) else ExitCode.SUCCESS)


if __name__ == "__main__":
    run()
