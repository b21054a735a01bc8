"""Utility modules for dcrinstall.

This module exports commonly used utility functions.
"""

from dcrinstall.utils.formatting import (
    console,
    create_component_table,
    err_console,
    print_error,
    print_info,
    print_success,
    print_warning,
)
from dcrinstall.utils.shell import CommandResult, run_command, run_interactive

__all__ = [
    "CommandResult",
    "console",
    "create_component_table",
    "err_console",
    "print_error",
    "print_info",
    "print_success",
    "print_warning",
    "run_command",
    "run_interactive",
]
