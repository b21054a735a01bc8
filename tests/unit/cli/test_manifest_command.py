"""Unit tests for the manifest commands."""

from pathlib import Path

from conftest import DECRED_ARCHIVE, Release, sha256_hex
from dcrinstall.cli.main import app
from typer.testing import CliRunner

runner = CliRunner()


class TestLocateCommand:
    """Tests for dcrinstall manifest locate."""

    def test_prints_entry(self, decred_release: Release) -> None:
        result = runner.invoke(
            app, ["manifest", "locate", str(decred_release.manifest), "--tuple", "linux-amd64"]
        )

        assert result.exit_code == 0, result.output
        assert result.stdout.strip() == f"{decred_release.digest}  {DECRED_ARCHIVE}"

    def test_not_found(self, decred_release: Release) -> None:
        result = runner.invoke(
            app, ["manifest", "locate", str(decred_release.manifest), "-t", "plan9-386"]
        )

        assert result.exit_code == 1
        assert "plan9-386" in result.output

    def test_unknown_family(self, decred_release: Release) -> None:
        result = runner.invoke(
            app, ["manifest", "locate", str(decred_release.manifest), "--family", "litecoin"]
        )

        assert result.exit_code == 1
        assert "Unknown family" in result.output


class TestListCommand:
    """Tests for dcrinstall manifest list."""

    def test_lists_every_entry(self, decred_release: Release) -> None:
        result = runner.invoke(app, ["manifest", "list", str(decred_release.manifest)])

        assert result.exit_code == 0
        assert len(result.stdout.splitlines()) == 5

    def test_malformed(self, tmp_path: Path) -> None:
        manifest = tmp_path / "m.txt"
        manifest.write_text("oops\n", encoding="utf-8")

        result = runner.invoke(app, ["manifest", "list", str(manifest)])

        assert result.exit_code == 1


class TestVerifyCommand:
    """Tests for dcrinstall manifest verify."""

    def test_prints_digest(self, tmp_path: Path) -> None:
        target = tmp_path / "file.bin"
        target.write_bytes(b"decred")

        result = runner.invoke(app, ["manifest", "verify", str(target)])

        assert result.stdout.strip() == f"{sha256_hex(b'decred')}  file.bin"

    def test_match(self, decred_release: Release) -> None:
        result = runner.invoke(
            app, ["manifest", "verify", str(decred_release.archive), decred_release.digest]
        )

        assert result.exit_code == 0
        assert "OK" in result.stdout

    def test_mismatch(self, decred_release: Release) -> None:
        result = runner.invoke(app, ["manifest", "verify", str(decred_release.archive), "0" * 64])

        assert result.exit_code == 1
