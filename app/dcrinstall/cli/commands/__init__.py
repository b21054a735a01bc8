"""CLI commands for dcrinstall.

This package contains all subcommand implementations.
"""

from dcrinstall.cli.commands import config, install, manifest, status

__all__ = ["config", "install", "manifest", "status"]
