"""Unit tests for component and manifest entry models."""

import pytest
from dcrinstall.models.component import ComponentDescriptor
from dcrinstall.models.manifest import ManifestEntry


class TestComponentDescriptor:
    """Tests for ComponentDescriptor dataclass."""

    def test_defaults(self) -> None:
        component = ComponentDescriptor(name="promptsecret")

        assert component.has_config is False
        assert component.supports_version is False
        assert component.app_name == "promptsecret"

    def test_config_folder_overrides_app_name(self) -> None:
        component = ComponentDescriptor(
            name="bitcoind",
            config="bitcoin.conf",
            sample_resource="sample-bitcoin.conf",
            config_folder="bitcoin",
        )

        assert component.has_config is True
        assert component.app_name == "bitcoin"

    def test_empty_name_raises(self) -> None:
        with pytest.raises(ValueError, match="cannot be empty"):
            ComponentDescriptor(name="")

    def test_config_without_sample_raises(self) -> None:
        with pytest.raises(ValueError, match="no sample"):
            ComponentDescriptor(name="dcrd", config="dcrd.conf")

    def test_directory_cannot_be_versioned(self) -> None:
        with pytest.raises(ValueError, match="cannot support --version"):
            ComponentDescriptor(name="site", directory=True, supports_version=True)

    def test_frozen(self) -> None:
        component = ComponentDescriptor(name="dcrd")

        with pytest.raises(AttributeError):
            component.name = "dcrwallet"  # type: ignore[misc]


class TestManifestEntry:
    """Tests for ManifestEntry dataclass."""

    def test_valid_entry(self) -> None:
        entry = ManifestEntry(digest="ab" * 32, filename="decred-linux-amd64-v1.6.0.tar.gz", line=3)

        assert entry.line == 3

    def test_empty_filename_raises(self) -> None:
        with pytest.raises(ValueError, match="filename cannot be empty"):
            ManifestEntry(digest="ab" * 32, filename="")

    def test_non_hex_digest_raises(self) -> None:
        with pytest.raises(ValueError, match="not hex"):
            ManifestEntry(digest="xyz", filename="a.tar.gz")
