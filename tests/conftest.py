"""Pytest configuration and shared fixtures.

This module contains fixtures used across all test modules. Every test
runs with HOME and XDG_CONFIG_HOME pointed into its tmp_path so nothing
touches the real application data directories.
"""

import hashlib
import io
import logging
import tarfile
from collections.abc import Callable, Iterable, Iterator
from dataclasses import dataclass, field
from pathlib import Path

import pytest
from dcrinstall.core.context import Credentials, RunContext
from dcrinstall.core.settings import ManifestSource, ManifestSources, Settings
from dcrinstall.families.decred import DECRED_COMPONENTS
from dcrinstall.process.base import ProcessMonitor
from dcrinstall.transport.fetch import Fetcher

TUPLE = "linux-amd64"
DECRED_VERSION = "v1.6.0"
DECRED_DIR = f"decred-{TUPLE}-{DECRED_VERSION}"
DECRED_ARCHIVE = f"{DECRED_DIR}.tar.gz"
DECRED_MANIFEST = f"decred-{DECRED_VERSION}-manifest.txt"

SAMPLE_CONFIGS: dict[str, str] = {
    "sample-dcrctl.conf": "[Application Options]\n; rpcuser=\n; rpcpass=\n; testnet=\n; simnet=\n",
    "sample-dcrd.conf": "[Application Options]\n; rpcuser=\n; rpcpass=\n; testnet=\n; simnet=\n",
    "sample-dcrwallet.conf": "[Application Options]\n; username=\n; password=\n; testnet=\n; simnet=\n",
    "sample-dcrlnd.conf": "[Application Options]\n; dcrd.rpcuser=\n; dcrd.rpcpass=\n",
    "sample-politeiavoter.conf": "[Application Options]\n; rpcuser=\n; rpcpass=\n",
}


def sha256_hex(data: bytes) -> str:
    """Hex SHA-256 of a byte string."""
    return hashlib.sha256(data).hexdigest()


def build_tarball(archive: Path, top: str, files: dict[str, str]) -> Path:
    """Write a .tar.gz holding ``files`` under the directory ``top``.

    Keys ending in ``/`` create directories.
    """
    with tarfile.open(archive, "w:gz") as tar:
        dir_info = tarfile.TarInfo(top)
        dir_info.type = tarfile.DIRTYPE
        dir_info.mode = 0o755
        tar.addfile(dir_info)
        for name, content in files.items():
            if name.endswith("/"):
                info = tarfile.TarInfo(f"{top}/{name.rstrip('/')}")
                info.type = tarfile.DIRTYPE
                info.mode = 0o755
                tar.addfile(info)
                continue
            data = content.encode("utf-8")
            info = tarfile.TarInfo(f"{top}/{name}")
            info.size = len(data)
            info.mode = 0o755
            tar.addfile(info, io.BytesIO(data))
    return archive


def write_manifest(path: Path, entries: Iterable[tuple[str, str]]) -> Path:
    """Write ``digest  filename`` lines to a manifest file."""
    path.write_text("".join(f"{digest}  {name}\n" for digest, name in entries), encoding="utf-8")
    return path


def decred_bundle_files() -> dict[str, str]:
    """Files of a complete Decred bundle for a POSIX tuple."""
    files = {c.name: f"#!/bin/sh\necho {c.name}\n" for c in DECRED_COMPONENTS}
    files.update(SAMPLE_CONFIGS)
    return files


@dataclass
class Release:
    """A local release directory with a manifest and one archive."""

    directory: Path
    manifest: Path
    archive: Path
    digest: str


class FakeMonitor(ProcessMonitor):
    """Process monitor reporting a fixed set of names as running."""

    def __init__(self, running: Iterable[str] = ()) -> None:
        self.names = set(running)

    def is_running(self, name: str) -> bool:
        return name in self.names


@dataclass
class FakeProber:
    """Version prober answering for files that exist under the destination.

    Attributes:
        output: ``--version`` output returned for existing binaries.
        overrides: Output per binary name, taking precedence over ``output``.
    """

    output: str = "dcrd version 1.6.0+release (Go version go1.15)"
    overrides: dict[str, str | None] = field(default_factory=dict)

    def __call__(self, binary: Path) -> str | None:
        name = binary.name.removesuffix(".exe")
        if name in self.overrides:
            return self.overrides[name]
        if not binary.exists():
            return None
        return self.output


@dataclass
class FakeWalletCreator:
    """Records wallet creation requests instead of running dcrwallet."""

    calls: list[tuple[Path, str]] = field(default_factory=list)

    def __call__(self, dcrwallet: Path, net: str) -> None:
        self.calls.append((dcrwallet, net))


@pytest.fixture(autouse=True)
def isolated_home(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point HOME and XDG_CONFIG_HOME into tmp_path and clear DCRINSTALL_* variables."""
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.setenv("XDG_CONFIG_HOME", str(home / ".config"))
    for var in ("DCRINSTALL_DEST", "DCRINSTALL_NET", "DCRINSTALL_TUPLE", "DCRINSTALL_SKIP_PGP"):
        monkeypatch.delenv(var, raising=False)
    return home


@pytest.fixture(autouse=True)
def reset_logging() -> Iterator[None]:
    """Undo setup_logging so caplog sees dcrinstall records in every test."""
    yield
    logger = logging.getLogger("dcrinstall")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.setLevel(logging.NOTSET)
    logger.propagate = True


@pytest.fixture
def decred_release(tmp_path: Path) -> Release:
    """A local Decred release: manifest plus linux-amd64 archive."""
    directory = tmp_path / "release"
    directory.mkdir()
    archive = build_tarball(directory / DECRED_ARCHIVE, DECRED_DIR, decred_bundle_files())
    digest = sha256_hex(archive.read_bytes())
    manifest = write_manifest(
        directory / DECRED_MANIFEST,
        [
            ("a" * 64, f"decred-linux-arm-{DECRED_VERSION}.tar.gz"),
            ("b" * 64, f"decred-linux-arm64-{DECRED_VERSION}.tar.gz"),
            (digest, DECRED_ARCHIVE),
            ("c" * 64, f"decred-windows-amd64-{DECRED_VERSION}.zip"),
            ("d" * 64, f"dcrinstall-windows-amd64-{DECRED_VERSION}.exe"),
        ],
    )
    return Release(directory=directory, manifest=manifest, archive=archive, digest=digest)


@pytest.fixture
def destination(tmp_path: Path) -> Path:
    """Empty install destination."""
    path = tmp_path / "decred"
    path.mkdir()
    return path


@pytest.fixture
def make_settings(destination: Path, decred_release: Release) -> Callable[..., Settings]:
    """Factory for Settings pointing at the local release."""

    def _make(**kwargs: object) -> Settings:
        values: dict[str, object] = {
            "destination": str(destination),
            "os_arch": TUPLE,
            "skip_pgp": True,
            "manifests": ManifestSources(decred=ManifestSource(uri=str(decred_release.manifest))),
        }
        values.update(kwargs)
        return Settings.model_validate(values)

    return _make


@pytest.fixture
def make_context(
    tmp_path: Path, make_settings: Callable[..., Settings]
) -> Callable[..., RunContext]:
    """Factory for a RunContext whose host and target tuple are linux-amd64."""

    def _make(
        settings: Settings | None = None,
        *,
        monitor: ProcessMonitor | None = None,
        prober: FakeProber | None = None,
        wallet_creator: FakeWalletCreator | None = None,
        host_tuple: str = TUPLE,
        fetcher: Fetcher | None = None,
    ) -> RunContext:
        settings = settings or make_settings()
        work_dir = tmp_path / "work"
        work_dir.mkdir(exist_ok=True)
        return RunContext(
            settings=settings,
            credentials=Credentials(username="alice", password="s3cret"),
            target_tuple=settings.os_arch or TUPLE,
            host_tuple=host_tuple,
            destination=settings.destination_path,
            work_dir=work_dir,
            fetcher=fetcher or Fetcher(),
            monitor=monitor or FakeMonitor(),
            version_prober=prober or FakeProber(),
            wallet_creator=wallet_creator or FakeWalletCreator(),
        )

    return _make
