"""Manifest inspection commands.

Offline helpers around the manifest locator and the digest check, useful
when preparing a ``--skip-download`` directory by hand.
"""

from pathlib import Path
from typing import Annotated

import typer

from dcrinstall.core.errors import IntegrityError
from dcrinstall.core.platform import runtime_tuple
from dcrinstall.families import FAMILIES, Family, get_family
from dcrinstall.integrity.digest import sha256_file, verify_digest
from dcrinstall.manifest.locator import ManifestError, locate, parse_manifest
from dcrinstall.utils.formatting import console, print_error, print_success

app = typer.Typer(
    help="Inspect release manifests.",
    invoke_without_command=True,
    no_args_is_help=True,
)


def _family_or_exit(name: str) -> Family:
    if name not in FAMILIES:
        print_error(f"Unknown family '{name}'. Choose from: {', '.join(FAMILIES)}")
        raise typer.Exit(code=1)
    return get_family(name)


@app.command("locate")
def locate_entry(
    manifest: Annotated[
        Path,
        typer.Argument(help="Manifest file to search.", exists=True, dir_okay=False),
    ],
    os_arch: Annotated[
        str | None,
        typer.Option("--tuple", "-t", help="OS-arch tuple [default: this host]."),
    ] = None,
    family_name: Annotated[
        str,
        typer.Option("--family", "-f", help="Manifest family: decred, dcrdex or bitcoin."),
    ] = "decred",
) -> None:
    """Print the manifest entry for a platform.

    Examples:
        dcrinstall manifest locate decred-v1.6.0-manifest.txt
        dcrinstall manifest locate SHA256SUMS.asc --family bitcoin -t linux-arm64
    """
    family = _family_or_exit(family_name)
    tuple_ = os_arch or runtime_tuple()
    try:
        entry = locate(tuple_, manifest, family.locate_policy)
    except ManifestError as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e
    console.print(f"{entry.digest}  {entry.filename}", highlight=False, soft_wrap=True)


@app.command("list")
def list_entries(
    manifest: Annotated[
        Path,
        typer.Argument(help="Manifest file to list.", exists=True, dir_okay=False),
    ],
) -> None:
    """Print every entry of a manifest."""
    try:
        entries = parse_manifest(manifest)
    except ManifestError as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e
    for entry in entries:
        console.print(f"{entry.digest}  {entry.filename}", highlight=False, soft_wrap=True)


@app.command()
def verify(
    file: Annotated[
        Path,
        typer.Argument(help="File to check.", exists=True, dir_okay=False),
    ],
    digest: Annotated[
        str | None,
        typer.Argument(help="Expected SHA-256 (hex). Omit to print the digest."),
    ] = None,
) -> None:
    """Check a file against a SHA-256 digest."""
    try:
        if digest is None:
            console.print(f"{sha256_file(file)}  {file.name}", highlight=False, soft_wrap=True)
            return
        verify_digest(file, digest)
    except IntegrityError as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e
    print_success(f"{file.name}: OK")

