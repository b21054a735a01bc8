"""Decred wallet and client certificate setup.

On a fresh install the Decred wallet is created interactively (the user
enters a passphrase and writes down the seed), and politeiavoter gets a
TLS client certificate that dcrwallet is told to trust.
"""

import logging
import shutil
import subprocess
from pathlib import Path

from dcrinstall.core.errors import InstallError, StateError
from dcrinstall.core.paths import app_data_dir
from dcrinstall.utils.shell import run_command, run_interactive

logger = logging.getLogger(__name__)

WALLET_DB = "wallet.db"
LN_WALLET_DB = "channel.db"
WALLET_CLIENTS_PEM = "clients.pem"
CLIENT_PEM = "client.pem"
CLIENT_KEY = "client-key.pem"


class WalletError(InstallError):
    """Raised when wallet creation or certificate generation fails."""


class ClientCertStateError(StateError):
    """Raised when only some of the client certificate files exist."""


def network_flags(net: str) -> list[str]:
    """Return the Decred command line flags selecting ``net``."""
    if net == "testnet":
        return ["--testnet"]
    if net == "simnet":
        return ["--simnet"]
    return []


def wallet_db_path(net: str) -> Path:
    """Path of the dcrwallet database for a network."""
    return app_data_dir("dcrwallet") / net / WALLET_DB


def ln_wallet_db_path(net: str) -> Path:
    """Path of the dcrlnd channel database for a network."""
    return app_data_dir("dcrlnd") / "data" / "graph" / net / LN_WALLET_DB


def create_wallet(dcrwallet: Path, net: str) -> None:
    """Create a wallet by running ``dcrwallet --create`` on the terminal.

    Args:
        dcrwallet: dcrwallet executable to run.
        net: Network name (mainnet, testnet or simnet).

    Raises:
        WalletError: If dcrwallet cannot be run or exits unsuccessfully.
    """
    args = [str(dcrwallet), "--create", *network_flags(net)]
    logger.info("Creating wallet: %s", net)
    try:
        returncode = run_interactive(args)
    except OSError as e:
        raise WalletError(f"cannot run {dcrwallet}: {e}") from e
    if returncode != 0:
        raise WalletError(f"can't create wallet: dcrwallet exited with status {returncode}")


def client_cert_paths() -> tuple[Path, Path, Path]:
    """Return (dcrwallet clients.pem, politeiavoter cert, politeiavoter key)."""
    pi_dir = app_data_dir("politeiavoter")
    return (
        app_data_dir("dcrwallet") / WALLET_CLIENTS_PEM,
        pi_dir / CLIENT_PEM,
        pi_dir / CLIENT_KEY,
    )


def ensure_client_certs(gencerts: Path) -> bool:
    """Generate politeiavoter client certificates unless they already exist.

    The certificate is created with ``gencerts`` and copied to dcrwallet's
    ``clients.pem``. The three files must be all present or all absent.

    Args:
        gencerts: gencerts executable to run.

    Returns:
        True if certificates were generated, False if they already existed.

    Raises:
        ClientCertStateError: If only some of the files exist.
        WalletError: If gencerts fails or the certificate cannot be copied.
    """
    wallet_cert, pi_cert, pi_key = client_cert_paths()
    present = [p.exists() for p in (wallet_cert, pi_cert, pi_key)]

    if all(present):
        logger.info("Client certs exist, skipping client cert generation")
        return False
    if any(present):
        listing = "\n".join(
            f"  {'exists ' if ok else 'missing'} {path}"
            for ok, path in zip(present, (wallet_cert, pi_cert, pi_key), strict=True)
        )
        raise ClientCertStateError(
            f"can't determine client certificate state, must perform manual upgrade\n{listing}"
        )

    pi_cert.parent.mkdir(mode=0o700, parents=True, exist_ok=True)
    logger.info("Running: %s %s %s", gencerts, pi_cert, pi_key)
    try:
        result = run_command([str(gencerts), str(pi_cert), str(pi_key)])
    except (OSError, subprocess.TimeoutExpired) as e:
        raise WalletError(f"cannot run {gencerts}: {e}") from e
    if not result.success:
        raise WalletError(f"gencerts failed: {result.combined_output.strip()}")

    logger.info("Installing: %s", wallet_cert)
    try:
        wallet_cert.parent.mkdir(mode=0o700, parents=True, exist_ok=True)
        shutil.copyfile(pi_cert, wallet_cert)
    except OSError as e:
        raise WalletError(f"cannot install {wallet_cert}: {e}") from e
    return True
