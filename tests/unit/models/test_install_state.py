"""Unit tests for install state models."""

from pathlib import Path

from dcrinstall.models.state import BinaryStatus, ConfigStatus, InstallState, InstallStatus


def _binaries(*versions: str | None) -> tuple[BinaryStatus, ...]:
    return tuple(
        BinaryStatus(f"bin{i}", Path(f"/opt/decred/bin{i}"), version) for i, version in enumerate(versions)
    )


def _configs(*present: bool) -> tuple[ConfigStatus, ...]:
    return tuple(ConfigStatus(f"conf{i}", Path(f"/home/u/.conf{i}"), exists) for i, exists in enumerate(present))


class TestBinaryStatus:
    """Tests for BinaryStatus dataclass."""

    def test_installed(self) -> None:
        assert BinaryStatus("dcrd", Path("/opt/dcrd"), "v1.6.0").installed is True
        assert BinaryStatus("dcrd", Path("/opt/dcrd")).installed is False


class TestInstallState:
    """Tests for InstallState classification."""

    def test_nothing_installed(self) -> None:
        state = InstallState("decred", _binaries(None, None), _configs(False, False))

        assert state.status == InstallStatus.NOTHING_INSTALLED
        assert state.is_fresh_install is True

    def test_fully_installed(self) -> None:
        state = InstallState("decred", _binaries("v1.6.0", "v1.6.0"), _configs(True, True))

        assert state.status == InstallStatus.FULLY_INSTALLED
        assert state.is_fresh_install is False
        assert state.versions == {"v1.6.0": ["bin0", "bin1"]}

    def test_partial_binaries(self) -> None:
        state = InstallState("decred", _binaries("v1.6.0", None), _configs(True, True))

        assert state.binaries_consistent is False
        assert state.status == InstallStatus.INCONSISTENT
        assert [b.name for b in state.missing_binaries] == ["bin1"]

    def test_partial_configs(self) -> None:
        state = InstallState("decred", _binaries(None, None), _configs(True, False))

        assert state.configs_consistent is False
        assert state.status == InstallStatus.INCONSISTENT
        assert [c.name for c in state.installed_configs] == ["conf0"]

    def test_configs_without_binaries_is_installed(self) -> None:
        """Configs left behind by an earlier install are kept and count as installed."""
        state = InstallState("decred", _binaries(None, None), _configs(True, True))

        assert state.status == InstallStatus.FULLY_INSTALLED
        assert state.is_fresh_install is True

    def test_mixed_versions(self) -> None:
        state = InstallState("decred", _binaries("v1.5.1", "v1.6.0", "v1.6.0"))

        assert state.versions == {"v1.5.1": ["bin0"], "v1.6.0": ["bin1", "bin2"]}
        assert state.is_consistent is True

    def test_uninspected(self) -> None:
        assert InstallState("decred", inspected=False).status == InstallStatus.UNKNOWN

    def test_empty_family_is_consistent(self) -> None:
        state = InstallState("bitcoin")

        assert state.is_consistent is True
        assert state.expected_binaries == 0
