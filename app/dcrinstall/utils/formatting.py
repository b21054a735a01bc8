"""Rich console formatting utilities.

Provides consistent formatting for CLI output using Rich.
"""

from __future__ import annotations

import sys
from typing import TYPE_CHECKING

from rich.console import Console
from rich.table import Table

from dcrinstall.core.theme import get_theme

if TYPE_CHECKING:
    from dcrinstall.models.state import BinaryStatus


def _detect_color_system() -> str | None:
    """Detect the best color system for the current terminal.

    Returns "truecolor" for interactive terminals to enable full hex color support,
    None otherwise to let Rich auto-detect.
    """
    if sys.stdout.isatty():
        return "truecolor"
    return None


# Shared console instances (theme loaded once at import)
console = Console(theme=get_theme(), color_system=_detect_color_system())
err_console = Console(theme=get_theme(), stderr=True, color_system=_detect_color_system())


def create_component_table(title: str) -> Table:
    """Create a pre-configured table for displaying component state.

    Args:
        title: Table title.

    Returns:
        Rich Table configured for component display.
    """
    table = Table(
        title=title,
        show_header=True,
        header_style="bold_header",
        border_style="border",
        row_styles=["", "on grey7"],
    )
    # Status column: icon only, no header text
    table.add_column("", width=2, justify="center")
    table.add_column("Component", no_wrap=True)
    table.add_column("Version", style="component.version")
    table.add_column("Path", style="muted", overflow="fold")
    return table


def format_binary_row(binary: BinaryStatus, running: bool = False) -> tuple[str, str, str, str]:
    """Format a probed binary as a table row.

    Args:
        binary: Version probe result.
        running: Whether the binary was found running.

    Returns:
        Tuple of (icon, name, version, path) with Rich markup.
    """
    if running:
        icon = "[running]▲[/]"
        name = f"[running]{binary.name}[/]"
    elif binary.installed:
        icon = "[installed]●[/]"
        name = f"[component.name]{binary.name}[/]"
    else:
        icon = "[missing]○[/]"
        name = f"[missing]{binary.name}[/]"

    version = binary.version or "-"
    return (icon, name, version, str(binary.path))


def print_info(message: str) -> None:
    """Print an info message."""
    console.print(f"[info]{message}[/]")


def print_warning(message: str) -> None:
    """Print a warning message."""
    err_console.print(f"[warning]Warning:[/] {message}")


def print_error(message: str) -> None:
    """Print an error message."""
    err_console.print(f"[error]Error:[/] {message}")


def print_success(message: str) -> None:
    """Print a success message."""
    console.print(f"[success]{message}[/]")
