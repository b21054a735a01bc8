"""Per-run context and intermediate results.

Everything a run needs is collected into one frozen RunContext up front:
settings, generated credentials, the target platform and the capability
objects that touch the outside world. Stages receive it explicitly.
"""

import base64
import getpass
import logging
import secrets
import subprocess
from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path

from dcrinstall.core.errors import InstallError
from dcrinstall.core.platform import runtime_tuple
from dcrinstall.core.settings import Settings
from dcrinstall.core.wallet import create_wallet
from dcrinstall.models.manifest import ManifestEntry
from dcrinstall.models.state import InstallState
from dcrinstall.process import ProcessMonitor, get_process_monitor
from dcrinstall.transport.fetch import Fetcher
from dcrinstall.utils.shell import run_command

logger = logging.getLogger(__name__)

# Runs ``<binary> --version``; returns the output, or None if it cannot be invoked
VersionProber = Callable[[Path], str | None]

# Creates a wallet with the given dcrwallet executable on the given network
WalletCreator = Callable[[Path, str], None]

PASSWORD_BYTES = 24


def probe_version(binary: Path) -> str | None:
    """Run ``binary --version`` and return its combined output.

    Returns:
        The output, or None when the binary is missing, cannot be executed
        or exits unsuccessfully.
    """
    try:
        result = run_command([str(binary), "--version"], timeout=30.0)
    except (OSError, subprocess.TimeoutExpired) as e:
        logger.debug("Cannot run %s --version: %s", binary, e)
        return None
    if not result.success:
        logger.debug("%s --version exited with status %d", binary, result.returncode)
        return None
    return result.combined_output


@dataclass(frozen=True, slots=True)
class Credentials:
    """RPC credentials written into freshly generated configs."""

    username: str
    password: str = field(repr=False)


def generate_credentials() -> Credentials:
    """Generate RPC credentials for a new install.

    The username is the current login name; the password is 24 random
    bytes, base64 encoded.

    Raises:
        InstallError: If the current user cannot be determined.
    """
    try:
        username = getpass.getuser()
    except (OSError, KeyError) as e:
        raise InstallError(f"cannot determine current user: {e}") from e
    password = base64.b64encode(secrets.token_bytes(PASSWORD_BYTES)).decode("ascii")
    return Credentials(username=username, password=password)


@dataclass(frozen=True, slots=True)
class RunContext:
    """Immutable state shared by every stage of a run.

    Attributes:
        settings: Resolved settings.
        credentials: Credentials for newly generated configs.
        target_tuple: ``os-arch`` tuple being installed.
        host_tuple: ``os-arch`` tuple of the running host.
        destination: Install destination (expanded).
        work_dir: Directory manifests and archives are fetched into.
        fetcher: Fetches URIs into files.
        monitor: Detects running processes.
        version_prober: Runs ``--version`` on installed binaries.
        wallet_creator: Creates the Decred wallet.
    """

    settings: Settings
    credentials: Credentials
    target_tuple: str
    host_tuple: str
    destination: Path
    work_dir: Path
    fetcher: Fetcher
    monitor: ProcessMonitor
    version_prober: VersionProber = probe_version
    wallet_creator: WalletCreator = create_wallet

    @property
    def is_foreign(self) -> bool:
        """True when installing for a platform other than the host."""
        return self.target_tuple != self.host_tuple

    @property
    def net(self) -> str:
        """Network name from the settings."""
        return self.settings.net


def build_context(
    settings: Settings,
    work_dir: Path,
    *,
    fetcher: Fetcher | None = None,
    monitor: ProcessMonitor | None = None,
    credentials: Credentials | None = None,
) -> RunContext:
    """Assemble the RunContext for a run.

    Args:
        settings: Resolved settings.
        work_dir: Directory to fetch into.
        fetcher: Fetcher override. Defaults to one serving ``settings.path``
            when downloads are skipped.
        monitor: Process monitor override.
        credentials: Credentials override. Generated when None.
    """
    destination = settings.destination_path
    if fetcher is None:
        local_dir = settings.local_path if settings.skip_download else None
        fetcher = Fetcher(local_dir=local_dir)

    return RunContext(
        settings=settings,
        credentials=credentials or generate_credentials(),
        target_tuple=settings.os_arch or runtime_tuple(),
        host_tuple=runtime_tuple(),
        destination=destination,
        work_dir=work_dir,
        fetcher=fetcher,
        monitor=monitor or get_process_monitor(destination),
    )


@dataclass(frozen=True, slots=True)
class PreparedBundle:
    """Result of the download, verify and extract phase for one family.

    Attributes:
        family: Family name.
        entry: Manifest entry selected for the target tuple.
        version: Bundle version (``vX.Y.Z``).
        source_dir: Extracted directory binaries are installed from.
        cached: True if a previous extraction was reused.
        archive: Downloaded archive, when one was fetched.
        state: Local install state found by the precondition checks.
    """

    family: str
    entry: ManifestEntry
    version: str
    source_dir: Path
    cached: bool = False
    archive: Path | None = None
    state: InstallState | None = None
