"""Status command implementation.

Shows which binaries and configs of each family are installed in the
destination, without downloading anything.
"""

from pathlib import Path
from typing import Annotated

import typer

from dcrinstall.cli.display import create_state_table, format_status
from dcrinstall.core.context import build_context
from dcrinstall.core.errors import InstallError
from dcrinstall.core.preconditions import inspect_state
from dcrinstall.core.settings import SettingsError, load_settings
from dcrinstall.families import FAMILIES, get_families, get_family
from dcrinstall.models.state import InstallStatus
from dcrinstall.utils.formatting import console, print_error, print_warning

app = typer.Typer(
    help="Show the local install state.",
    invoke_without_command=True,
)


@app.callback(invoke_without_command=True)
def status(
    dest: Annotated[
        str | None,
        typer.Option("--dest", "-d", help="Install destination [default: ~/decred]."),
    ] = None,
    all_families: Annotated[
        bool,
        typer.Option("--all", "-a", help="Show every family, not only the selected ones."),
    ] = False,
    config: Annotated[
        Path | None,
        typer.Option("--config", "-c", help="Settings file [default: ~/.config/dcrinstall/config.toml]."),
    ] = None,
) -> None:
    """Show installed binaries, their versions and config files.

    Exits with status 1 if any family is partially installed.

    Examples:
        dcrinstall status
        dcrinstall status --all --dest /opt/decred
    """
    overrides = {"destination": dest} if dest is not None else None
    try:
        settings = load_settings(config, overrides=overrides)
    except SettingsError as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e

    if all_families:
        families = [get_family(name) for name in FAMILIES]
    else:
        families = get_families(settings)

    try:
        context = build_context(settings, settings.destination_path)
    except InstallError as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e

    if context.is_foreign:
        print_warning(f"Target {context.target_tuple} is not this host; nothing to inspect.")
        return

    console.print(f"[header]Destination:[/header] {context.destination}")
    inconsistent = False
    try:
        for family in families:
            state = inspect_state(family, context)
            console.print(create_state_table(family, state))
            console.print(f"  Status: {format_status(state.status)}")
            if state.status == InstallStatus.INCONSISTENT:
                inconsistent = True
    except InstallError as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e

    if inconsistent:
        print_error("Partial install found. Human intervention is required.")
        raise typer.Exit(code=1)
