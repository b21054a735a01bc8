"""Main CLI application entry point.

Defines the Typer application and global options.
"""

from typing import Annotated

import typer

from dcrinstall import __version__
from dcrinstall.cli.commands import config, install, manifest, status

# Create main Typer app
app = typer.Typer(
    name="dcrinstall",
    help="Download, verify and install the Decred binaries.",
    no_args_is_help=True,
    rich_markup_mode="rich",
    context_settings={"help_option_names": ["-h", "--help"]},
)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"dcrinstall version {__version__}")
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
    verbose: Annotated[
        bool,
        typer.Option(
            "--verbose",
            "-v",
            help="Log debug messages to the console.",
        ),
    ] = False,
    quiet: Annotated[
        bool,
        typer.Option(
            "--quiet",
            "-q",
            help="Only log warnings and errors to the console.",
        ),
    ] = False,
) -> None:
    """dcrinstall - Install and upgrade the Decred binaries.

    Fetches the signed release manifests, verifies every archive and
    installs the binaries and their initial configuration.
    """
    # Store options in context for subcommands
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["quiet"] = quiet


# Register commands
app.add_typer(install.app, name="install")
app.add_typer(status.app, name="status")
app.add_typer(manifest.app, name="manifest")
app.add_typer(config.app, name="config")


if __name__ == "__main__":
    app()
