"""Integration tests for the install flow.

These run ``dcrinstall install`` for all three families against local
release directories and check the files left on disk, including what a
second run does to an existing install.
"""

from collections.abc import Iterator
from pathlib import Path
from unittest.mock import patch

import pytest
from conftest import (
    DECRED_DIR,
    TUPLE,
    FakeMonitor,
    Release,
    build_tarball,
    sha256_hex,
    write_manifest,
)
from dcrinstall.cli.main import app
from dcrinstall.core.context import Credentials
from dcrinstall.utils.shell import CommandResult
from typer.testing import CliRunner

runner = CliRunner()

DCRDEX_DIR = f"dexc-{TUPLE}-v0.1.0"


def _release(
    directory: Path, manifest_name: str, archive_name: str, top: str, files: dict[str, str]
) -> Release:
    directory.mkdir()
    archive = build_tarball(directory / archive_name, top, files)
    digest = sha256_hex(archive.read_bytes())
    manifest = write_manifest(directory / manifest_name, [(digest, archive_name)])
    return Release(directory=directory, manifest=manifest, archive=archive, digest=digest)


@pytest.fixture
def dcrdex_release(tmp_path: Path) -> Release:
    return _release(
        tmp_path / "dcrdex-release",
        "dexc-v0.1.0-manifest.txt",
        f"{DCRDEX_DIR}.tar.gz",
        DCRDEX_DIR,
        {"dexc": "dexc", "dexcctl": "dexcctl", "site/": "", "site/index.html": "<html></html>"},
    )


@pytest.fixture
def bitcoin_release(tmp_path: Path) -> Release:
    return _release(
        tmp_path / "bitcoin-release",
        "SHA256SUMS.asc",
        "bitcoin-0.20.1-x86_64-linux-gnu.tar.gz",
        "bitcoin-0.20.1",
        {"bin/": "", "bin/bitcoind": "bitcoind", "bin/bitcoin-cli": "bitcoin-cli"},
    )


def _fake_version(args: list[str], **kwargs: object) -> CommandResult:
    if not Path(args[0]).exists():
        raise FileNotFoundError(args[0])
    output = f"{Path(args[0]).name} version 1.6.0+release\n"
    return CommandResult(stdout=output, stderr="", returncode=0)


@pytest.fixture
def host() -> Iterator[FakeMonitor]:
    """A linux-amd64 host with nothing running and no real gencerts."""
    monitor = FakeMonitor()
    with (
        patch("dcrinstall.core.context.runtime_tuple", return_value=TUPLE),
        patch("dcrinstall.core.context.get_process_monitor", return_value=monitor),
        patch("dcrinstall.core.context.run_command", side_effect=_fake_version),
        patch(
            "dcrinstall.core.context.generate_credentials",
            return_value=Credentials(username="alice", password="s3cret"),
        ),
        patch("dcrinstall.families.decred.ensure_client_certs", return_value=True),
    ):
        yield monitor


@pytest.fixture
def install_args(
    destination: Path, decred_release: Release, dcrdex_release: Release, bitcoin_release: Release
) -> list[str]:
    return [
        "install",
        "--dest",
        str(destination),
        "--tuple",
        TUPLE,
        "--dcrdex",
        "--bitcoin",
        "--decred-manifest",
        str(decred_release.manifest),
        "--dcrdex-manifest",
        str(dcrdex_release.manifest),
        "--bitcoin-manifest",
        str(bitcoin_release.manifest),
        "--skip-pgp",
        "--no-wallet",
    ]


@pytest.mark.usefixtures("host")
class TestInstallFlow:
    """End-to-end installs of every family."""

    def test_installs_all_families(
        self, install_args: list[str], destination: Path, isolated_home: Path
    ) -> None:
        result = runner.invoke(app, install_args)

        assert result.exit_code == 0, result.output
        for name in ("dcrd", "dcrwallet", "gencerts", "dexc", "dexcctl", "bitcoind", "bitcoin-cli"):
            assert (destination / name).is_file(), name
        assert (destination / "site" / "index.html").is_file()
        assert (destination / DECRED_DIR).is_dir()
        assert (destination / DCRDEX_DIR).is_dir()
        assert (destination / "bitcoin-0.20.1").is_dir()

        assert "rpcuser=alice" in (isolated_home / ".dexc" / "dexc.conf").read_text(encoding="utf-8")
        bitcoin_conf = isolated_home / ".bitcoin" / "bitcoin.conf"
        assert "rpcpassword=s3cret" in bitcoin_conf.read_text(encoding="utf-8")
        assert "DCRDEX" in result.stdout

    def test_rerun_is_idempotent(self, install_args: list[str], destination: Path) -> None:
        """A second run reuses every extraction and leaves the install byte-identical."""
        first = runner.invoke(app, install_args)
        assert first.exit_code == 0, first.output
        before = {p.name: p.read_bytes() for p in destination.iterdir() if p.is_file()}

        second = runner.invoke(app, install_args)

        assert second.exit_code == 0, second.output
        assert second.stdout.count("(cached") == 3
        after = {p.name: p.read_bytes() for p in destination.iterdir() if p.name in before}
        before.pop("dcrinstaller.log")
        after.pop("dcrinstaller.log")
        assert after == before

    def test_user_edited_config_survives(
        self, install_args: list[str], isolated_home: Path
    ) -> None:
        conf = isolated_home / ".dcrd" / "dcrd.conf"
        runner.invoke(app, install_args)
        conf.write_text("[Application Options]\nrpcuser=bob\n", encoding="utf-8")

        result = runner.invoke(app, install_args)

        assert result.exit_code == 0, result.output
        assert conf.read_text(encoding="utf-8") == "[Application Options]\nrpcuser=bob\n"

    def test_partial_install_changes_nothing(
        self, install_args: list[str], destination: Path, isolated_home: Path
    ) -> None:
        (destination / "dexc").write_text("old dexc", encoding="utf-8")

        result = runner.invoke(app, install_args)

        assert result.exit_code == 1
        assert "dcrdex check preconditions" in result.output
        assert (destination / "dexc").read_text(encoding="utf-8") == "old dexc"
        assert not (destination / "dcrd").exists()
        assert not (isolated_home / ".dcrd").exists()

    def test_corrupt_archive_changes_nothing(
        self, install_args: list[str], destination: Path, bitcoin_release: Release
    ) -> None:
        bitcoin_release.archive.write_bytes(b"not the signed archive")

        result = runner.invoke(app, install_args)

        assert result.exit_code == 1
        assert "bitcoin verify archive digest" in result.output
        assert not (destination / "dcrd").exists()
        assert not (destination / "bitcoin-0.20.1").exists()
