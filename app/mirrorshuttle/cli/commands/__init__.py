"""CLI commands for mirrorshuttle.

This package contains all subcommand implementations.
"""

from mirrorshuttle.cli.commands import init, move

__all__ = ["init", "move"]
