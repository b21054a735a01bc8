"""CLI package for dcrinstall.

This package contains the Typer application and all subcommands.
"""

from dcrinstall.cli.main import app

__all__ = ["app"]
