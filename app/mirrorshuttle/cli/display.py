"""Rich display functions for run results."""

from rich.table import Table

from mirrorshuttle.core.config import ShuttleOptions, dump_options
from mirrorshuttle.core.exit_codes import ExitCode
from mirrorshuttle.core.shuttle import Mode, RunReport
from mirrorshuttle.utils.formatting import console


def print_banner(version: str) -> None:
    """Print the startup banner."""
    console.print(
        f"[bold_header]MirrorShuttle (v{version})[/] - "
        "Keep your organization, ditch the ransomware."
    )
    console.print()


def print_configuration(mode: Mode, options: ShuttleOptions) -> None:
    """Print the effective configuration as indented YAML."""
    console.print(f"configuration for '{mode.value}':", highlight=False)
    for line in dump_options(options).splitlines():
        console.print(f"\t{line}", markup=False, highlight=False)
    console.print()


def create_summary_table(report: RunReport, dry_run: bool = False) -> Table:
    """Create a Rich table summarizing a finished run.

    Args:
        report: Report of the finished run.
        dry_run: Whether this was a dry-run (changes table title).

    Returns:
        Rich Table with one row per counter or flag.
    """
    title = f"Summary: {report.mode.value}"
    if dry_run:
        title += " (Dry Run)"

    table = Table(
        title=title,
        show_header=True,
        header_style="bold_header",
        border_style="border",
    )
    table.add_column("Item")
    table.add_column("Value", justify="right")

    outcome = report.outcome
    table.add_row("Directories created", f"[created]{outcome.created_dirs}[/created]")
    if report.mode is Mode.MOVE:
        table.add_row("Files moved", f"[moved]{outcome.moved_files}[/moved]")
        table.add_row("Directories removed", f"[muted]{outcome.removed_dirs}[/muted]")
        table.add_row("Unmoved files", _flag(outcome.has_unmoved_files, "unmoved"))
    table.add_row("Partial failures", _flag(outcome.has_partial_failures, "failed"))

    status = "success" if report.exit_code is ExitCode.SUCCESS else "error"
    code = report.exit_code
    table.add_row("Exit code", f"[{status}]{int(code)} ({code.name})[/{status}]")
    return table


def print_summary(report: RunReport, dry_run: bool = False) -> None:
    """Print the summary table of a finished run."""
    console.print()
    console.print(create_summary_table(report, dry_run))


def _flag(value: bool, style: str) -> str:
    return f"[{style}]yes[/{style}]" if value else "[muted]no[/muted]"
