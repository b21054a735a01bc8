"""Unit tests for settings resolution."""

import tomllib
from pathlib import Path

import pytest
from dcrinstall.core.settings import (
    BITCOIN_MANIFEST_URI,
    DECRED_MANIFEST_URI,
    Settings,
    SettingsError,
    load_settings,
    save_settings,
    settings_from_env,
    settings_to_dict,
)


class TestSettingsModel:
    """Tests for Settings validation."""

    def test_defaults(self) -> None:
        settings = Settings()

        assert settings.destination == "~/decred"
        assert settings.net == "mainnet"
        assert settings.create_wallet is True
        assert settings.families == ["decred"]
        assert settings.manifests.decred.uri == DECRED_MANIFEST_URI

    def test_families_order(self) -> None:
        """Decred is always first, then the opt-in families."""
        assert Settings(bitcoin=True, dcrdex=True).families == ["decred", "dcrdex", "bitcoin"]

    def test_unknown_network(self) -> None:
        with pytest.raises(ValueError):
            Settings(net="regtest")  # type: ignore[arg-type]

    def test_bad_tuple(self) -> None:
        with pytest.raises(ValueError):
            Settings(os_arch="Linux_AMD64")

    def test_skip_download_needs_path(self) -> None:
        with pytest.raises(ValueError, match="download path"):
            Settings(skip_download=True)

    def test_skip_download_excludes_download_only(self, tmp_path: Path) -> None:
        with pytest.raises(ValueError, match="mutually exclusive"):
            Settings(skip_download=True, download_only=True, path=str(tmp_path))

    def test_manifest_digest_must_be_hex(self) -> None:
        with pytest.raises(ValueError):
            Settings.model_validate({"manifests": {"decred": {"uri": "x", "digest": "zz"}}})

    def test_frozen(self) -> None:
        settings = Settings()

        with pytest.raises(ValueError):
            settings.net = "testnet"  # type: ignore[misc]

    def test_destination_path_expands(self, isolated_home: Path) -> None:
        assert Settings().destination_path == isolated_home / "decred"


class TestSettingsFromEnv:
    """Tests for settings_from_env function."""

    def test_maps_variables(self) -> None:
        env = {
            "DCRINSTALL_DEST": "/opt/decred",
            "DCRINSTALL_NET": "testnet",
            "DCRINSTALL_TUPLE": "linux-arm64",
            "DCRINSTALL_SKIP_PGP": "yes",
            "UNRELATED": "1",
        }

        assert settings_from_env(env) == {
            "destination": "/opt/decred",
            "net": "testnet",
            "os_arch": "linux-arm64",
            "skip_pgp": True,
        }

    def test_empty_values_are_ignored(self) -> None:
        assert settings_from_env({"DCRINSTALL_DEST": ""}) == {}

    def test_bad_boolean(self) -> None:
        with pytest.raises(SettingsError, match="DCRINSTALL_SKIP_PGP"):
            settings_from_env({"DCRINSTALL_SKIP_PGP": "maybe"})


class TestLoadSettings:
    """Tests for load_settings function."""

    def test_missing_file_uses_defaults(self, tmp_path: Path) -> None:
        settings = load_settings(tmp_path / "missing.toml", env={})

        assert settings == Settings()

    def test_precedence(self, tmp_path: Path) -> None:
        """File < environment < overrides."""
        path = tmp_path / "config.toml"
        path.write_text('destination = "/from/file"\nnet = "simnet"\ndcrdex = true\n')

        settings = load_settings(
            path,
            env={"DCRINSTALL_NET": "testnet", "DCRINSTALL_DEST": "/from/env"},
            overrides={"destination": "/from/cli"},
        )

        assert settings.destination == "/from/cli"
        assert settings.net == "testnet"
        assert settings.dcrdex is True

    def test_manifest_overrides_merge_per_family(self, tmp_path: Path) -> None:
        path = tmp_path / "config.toml"
        path.write_text('[manifests.decred]\nuri = "/srv/manifest.txt"\n')

        settings = load_settings(
            path,
            env={},
            overrides={"manifests": {"decred": {"digest": "a" * 64}}},
        )

        assert settings.manifests.decred.uri == "/srv/manifest.txt"
        assert settings.manifests.decred.digest == "a" * 64
        assert settings.manifests.bitcoin.uri == BITCOIN_MANIFEST_URI

    def test_digest_only_keeps_default_uri(self, tmp_path: Path) -> None:
        settings = load_settings(
            tmp_path / "missing.toml",
            env={},
            overrides={"manifests": {"decred": {"digest": "b" * 64}}},
        )

        assert settings.manifests.decred.uri == DECRED_MANIFEST_URI
        assert settings.manifests.decred.digest == "b" * 64

    def test_invalid_toml(self, tmp_path: Path) -> None:
        path = tmp_path / "config.toml"
        path.write_text("destination = [")

        with pytest.raises(SettingsError, match="Invalid TOML"):
            load_settings(path, env={})

    def test_unknown_key(self, tmp_path: Path) -> None:
        path = tmp_path / "config.toml"
        path.write_text("colour = true\n")

        with pytest.raises(SettingsError, match="Invalid settings"):
            load_settings(path, env={})

    def test_reads_environment_by_default(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("DCRINSTALL_NET", "simnet")

        assert load_settings(tmp_path / "missing.toml").net == "simnet"


class TestSaveSettings:
    """Tests for save_settings function."""

    def test_round_trip(self, tmp_path: Path) -> None:
        path = tmp_path / "nested" / "config.toml"
        settings = Settings(net="testnet", bitcoin=True)

        saved = save_settings(settings, path)

        assert saved == path
        assert load_settings(path, env={}) == settings

    def test_omits_none(self, tmp_path: Path) -> None:
        """TOML has no null, so unset optional values are left out."""
        path = save_settings(Settings(), tmp_path / "config.toml")

        with open(path, "rb") as f:
            data = tomllib.load(f)

        assert "os_arch" not in data
        assert "digest" not in data["manifests"]["decred"]
        assert settings_to_dict(Settings())["net"] == "mainnet"

    def test_no_temp_files_left(self, tmp_path: Path) -> None:
        save_settings(Settings(), tmp_path / "config.toml")

        assert [p.name for p in tmp_path.iterdir()] == ["config.toml"]
