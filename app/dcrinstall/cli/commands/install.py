"""Install command implementation.

Downloads, verifies and installs the selected bundles into the
destination directory, upgrading an existing install in place.
"""

import logging
import tempfile
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import Annotated, Any

import typer

from dcrinstall.cli.display import print_run_summary
from dcrinstall.core.context import build_context
from dcrinstall.core.errors import InstallError
from dcrinstall.core.logging_setup import log_banner, setup_logging
from dcrinstall.core.orchestrator import Orchestrator
from dcrinstall.core.paths import ensure_destination_dir
from dcrinstall.core.settings import Settings, SettingsError, load_settings
from dcrinstall.families import get_families
from dcrinstall.utils.formatting import print_error, print_info

logger = logging.getLogger(__name__)

app = typer.Typer(
    help="Download, verify and install the Decred bundles.",
    invoke_without_command=True,
)

DOWNLOADS_DIR = "downloads"


def build_overrides(**options: Any) -> dict[str, Any]:
    """Turn command line options into settings overrides.

    Options left unset (None) do not override the settings file.
    ``<family>_manifest`` and ``<family>_manifest_digest`` options are
    folded into the nested ``manifests`` table.
    """
    overrides: dict[str, Any] = {}
    manifests: dict[str, dict[str, str]] = {}
    for key, value in options.items():
        if value is None:
            continue
        if key.endswith("_manifest_digest"):
            manifests.setdefault(key.removesuffix("_manifest_digest"), {})["digest"] = value
        elif key.endswith("_manifest"):
            manifests.setdefault(key.removesuffix("_manifest"), {})["uri"] = value
        else:
            overrides[key] = value
    if manifests:
        overrides["manifests"] = manifests
    return overrides


@contextmanager
def work_directory(settings: Settings) -> Iterator[Path]:
    """Yield the directory manifests and archives are fetched into.

    Download-only runs keep the verified files in ``<dest>/downloads``;
    every other run uses a temporary directory removed afterwards.
    """
    if settings.download_only:
        path = settings.destination_path / DOWNLOADS_DIR
        path.mkdir(mode=0o700, parents=True, exist_ok=True)
        yield path
        return
    with tempfile.TemporaryDirectory(prefix="dcrinstall-") as tmp:
        yield Path(tmp)


@app.callback(invoke_without_command=True)
def install(
    ctx: typer.Context,
    dest: Annotated[
        str | None,
        typer.Option("--dest", "-d", help="Install destination [default: ~/decred]."),
    ] = None,
    net: Annotated[
        str | None,
        typer.Option("--net", help="Decred network: mainnet, testnet or simnet."),
    ] = None,
    os_arch: Annotated[
        str | None,
        typer.Option("--tuple", help="OS-arch tuple to install, e.g. windows-amd64."),
    ] = None,
    dcrdex: Annotated[
        bool | None,
        typer.Option("--dcrdex/--no-dcrdex", help="Install the dcrdex bundle."),
    ] = None,
    bitcoin: Annotated[
        bool | None,
        typer.Option("--bitcoin/--no-bitcoin", help="Install the Bitcoin Core bundle."),
    ] = None,
    decred_manifest: Annotated[
        str | None,
        typer.Option("--decred-manifest", help="Decred manifest URI or path."),
    ] = None,
    dcrdex_manifest: Annotated[
        str | None,
        typer.Option("--dcrdex-manifest", help="dcrdex manifest URI or path."),
    ] = None,
    bitcoin_manifest: Annotated[
        str | None,
        typer.Option("--bitcoin-manifest", help="Bitcoin Core manifest URI or path."),
    ] = None,
    decred_manifest_digest: Annotated[
        str | None,
        typer.Option("--decred-manifest-digest", help="Expected SHA-256 of the Decred manifest."),
    ] = None,
    dcrdex_manifest_digest: Annotated[
        str | None,
        typer.Option("--dcrdex-manifest-digest", help="Expected SHA-256 of the dcrdex manifest."),
    ] = None,
    bitcoin_manifest_digest: Annotated[
        str | None,
        typer.Option("--bitcoin-manifest-digest", help="Expected SHA-256 of the bitcoin manifest."),
    ] = None,
    skip_pgp: Annotated[
        bool | None,
        typer.Option("--skip-pgp", help="Do not check manifest signatures."),
    ] = None,
    force_download: Annotated[
        bool | None,
        typer.Option("--force-download", help="Download archives even if already extracted."),
    ] = None,
    allow_running: Annotated[
        bool | None,
        typer.Option("--allow-running", help="Replace binaries even if they are running."),
    ] = None,
    download_only: Annotated[
        bool | None,
        typer.Option("--download-only", help="Download and verify archives, do not install."),
    ] = None,
    skip_download: Annotated[
        bool | None,
        typer.Option("--skip-download", help="Use manifests and archives from --path."),
    ] = None,
    path: Annotated[
        str | None,
        typer.Option("--path", help="Directory holding previously downloaded files."),
    ] = None,
    no_wallet: Annotated[
        bool,
        typer.Option("--no-wallet", help="Do not create the Decred wallet."),
    ] = False,
    config: Annotated[
        Path | None,
        typer.Option("--config", "-c", help="Settings file [default: ~/.config/dcrinstall/config.toml]."),
    ] = None,
) -> None:
    """Install or upgrade the Decred binaries.

    Every selected bundle is downloaded, checked against its signed
    manifest and extracted before anything is installed. An existing
    install is only upgraded when it is complete and nothing is running.

    Examples:
        dcrinstall install                          # Latest Decred release
        dcrinstall install --dcrdex --bitcoin       # Include the DEX client
        dcrinstall install --net testnet
        dcrinstall install --download-only --dest /tmp/dcr
    """
    obj = ctx.obj or {}
    verbose = bool(obj.get("verbose", False))
    quiet = bool(obj.get("quiet", False))

    overrides = build_overrides(
        destination=dest,
        net=net,
        os_arch=os_arch,
        dcrdex=dcrdex,
        bitcoin=bitcoin,
        decred_manifest=decred_manifest,
        dcrdex_manifest=dcrdex_manifest,
        bitcoin_manifest=bitcoin_manifest,
        decred_manifest_digest=decred_manifest_digest,
        dcrdex_manifest_digest=dcrdex_manifest_digest,
        bitcoin_manifest_digest=bitcoin_manifest_digest,
        skip_pgp=skip_pgp,
        force_download=force_download,
        allow_running=allow_running,
        download_only=download_only,
        skip_download=skip_download,
        path=path,
        create_wallet=False if no_wallet else None,
    )

    try:
        settings = load_settings(config, overrides=overrides)
    except SettingsError as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e

    destination = settings.destination_path
    try:
        ensure_destination_dir(destination)
    except RuntimeError as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e

    log_path = setup_logging(destination, verbose=verbose, quiet=quiet)
    log_banner("run")
    try:
        with work_directory(settings) as work_dir:
            context = build_context(settings, work_dir)
            result = Orchestrator(context, get_families(settings)).run()
    except InstallError as e:
        logger.debug("Run failed", exc_info=True)
        print_error(str(e))
        if log_path is not None:
            print_info(f"See {log_path} for details.")
        raise typer.Exit(code=1) from e
    finally:
        log_banner("complete")

    if not quiet:
        print_run_summary(result)
