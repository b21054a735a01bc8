"""Settings file commands.

Show, create and locate the settings file that provides defaults for
``dcrinstall install``.
"""

from pathlib import Path
from typing import Annotated

import tomli_w
import typer

from dcrinstall.core.paths import get_settings_path
from dcrinstall.core.settings import (
    Settings,
    SettingsError,
    load_settings,
    save_settings,
    settings_to_dict,
)
from dcrinstall.utils.formatting import console, print_error, print_info, print_success

app = typer.Typer(
    help="Manage the dcrinstall settings file.",
    invoke_without_command=True,
    no_args_is_help=True,
)

ConfigOption = Annotated[
    Path | None,
    typer.Option("--config", "-c", help="Settings file [default: ~/.config/dcrinstall/config.toml]."),
]


@app.command()
def show(config: ConfigOption = None) -> None:
    """Print the effective settings as TOML.

    Values come from the settings file and ``DCRINSTALL_*`` environment
    variables, in that order of precedence (lowest first).
    """
    try:
        settings = load_settings(config)
    except SettingsError as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e
    console.print(
        tomli_w.dumps(settings_to_dict(settings)),
        highlight=False,
        markup=False,
        soft_wrap=True,
    )


@app.command()
def init(
    config: ConfigOption = None,
    force: Annotated[
        bool,
        typer.Option("--force", "-f", help="Overwrite an existing settings file."),
    ] = False,
) -> None:
    """Write a settings file holding the default values."""
    path = config or get_settings_path()
    if path.exists() and not force:
        print_error(f"Settings file already exists: {path}")
        print_info("Use --force to overwrite it.")
        raise typer.Exit(code=1)

    try:
        saved = save_settings(Settings(), path)
    except SettingsError as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e
    print_success(f"Settings written to {saved}")


@app.command()
def path(config: ConfigOption = None) -> None:
    """Print the settings file location."""
    console.print(str(config or get_settings_path()), highlight=False, soft_wrap=True)
