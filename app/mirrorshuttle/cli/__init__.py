"""CLI package for mirrorshuttle.

This package contains the Typer application and all subcommands.
"""

from mirrorshuttle.cli.main import app

__all__ = ["app"]
