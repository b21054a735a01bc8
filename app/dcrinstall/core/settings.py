"""Run settings.

Settings are resolved once at startup from, in increasing priority:

1. Built-in defaults
2. The TOML settings file (~/.config/dcrinstall/config.toml)
3. ``DCRINSTALL_*`` environment variables
4. Command line overrides

The resulting :class:`Settings` object is frozen and never mutated.
"""

import logging
import os
import tomllib
from collections.abc import Mapping
from pathlib import Path
from typing import Annotated, Any, Literal

import tomli_w
from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

from dcrinstall.core.errors import InstallError
from dcrinstall.core.paths import DEFAULT_DESTINATION, expand_destination, get_settings_path

logger = logging.getLogger(__name__)

NetworkName = Literal["mainnet", "testnet", "simnet"]

DECRED_MANIFEST_URI = (
    "https://github.com/decred/decred-binaries/releases/download/v1.6.0/decred-v1.6.0-manifest.txt"
)
DCRDEX_MANIFEST_URI = (
    "https://github.com/decred/dcrdex/releases/download/v0.1.0/dexc-v0.1.0-manifest.txt"
)
BITCOIN_MANIFEST_URI = "https://bitcoincore.org/bin/bitcoin-core-0.20.1/SHA256SUMS.asc"

_DEFAULT_URIS: dict[str, str] = {
    "decred": DECRED_MANIFEST_URI,
    "dcrdex": DCRDEX_MANIFEST_URI,
    "bitcoin": BITCOIN_MANIFEST_URI,
}

# Environment variable -> settings field
ENV_VARS: dict[str, str] = {
    "DCRINSTALL_DEST": "destination",
    "DCRINSTALL_NET": "net",
    "DCRINSTALL_TUPLE": "os_arch",
    "DCRINSTALL_SKIP_PGP": "skip_pgp",
}

_TRUE_VALUES = frozenset({"1", "true", "yes", "on"})
_FALSE_VALUES = frozenset({"0", "false", "no", "off", ""})


class SettingsError(InstallError):
    """Raised when settings cannot be loaded, validated or saved."""


class ManifestSource(BaseModel):
    """Where a family's release manifest comes from.

    Attributes:
        uri: URI (or local path) of the manifest. Archives are fetched from
            the same directory.
        digest: Optional expected SHA-256 of the manifest itself.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    uri: Annotated[str, Field(min_length=1, description="Manifest URI")]
    digest: Annotated[
        str | None,
        Field(pattern=r"^[0-9a-fA-F]{64}$", description="Expected manifest SHA-256"),
    ] = None


class ManifestSources(BaseModel):
    """Manifest source per product family."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    decred: ManifestSource = ManifestSource(uri=DECRED_MANIFEST_URI)
    dcrdex: ManifestSource = ManifestSource(uri=DCRDEX_MANIFEST_URI)
    bitcoin: ManifestSource = ManifestSource(uri=BITCOIN_MANIFEST_URI)

    @model_validator(mode="before")
    @classmethod
    def _default_uris(cls, data: Any) -> Any:
        """Let a table set only the digest and keep the default URI."""
        if not isinstance(data, Mapping):
            return data
        filled = dict(data)
        for name, default in _DEFAULT_URIS.items():
            source = filled.get(name)
            if isinstance(source, Mapping) and "uri" not in source:
                filled[name] = {**source, "uri": default}
        return filled

    def for_family(self, family: str) -> ManifestSource:
        """Return the source for a family by name."""
        source: ManifestSource = getattr(self, family)
        return source


class Settings(BaseModel):
    """Frozen settings for one dcrinstall run.

    Attributes:
        destination: Directory the binaries are installed into.
        net: Decred network the generated configs and wallet target.
        os_arch: Target ``os-arch`` tuple. None means the running host.
        dcrdex: Install the dcrdex bundle.
        bitcoin: Install the bitcoin bundle.
        skip_pgp: Skip manifest signature checks.
        force_download: Ignore previously extracted archives.
        allow_running: Downgrade the running-process check to a warning.
        download_only: Download and verify archives, do not install.
        skip_download: Read manifests and archives from ``path``.
        path: Local directory used by ``skip_download``.
        create_wallet: Create the Decred wallet on first install.
        manifests: Manifest source per family.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    destination: Annotated[str, Field(min_length=1)] = DEFAULT_DESTINATION
    net: NetworkName = "mainnet"
    os_arch: Annotated[str | None, Field(pattern=r"^[a-z0-9]+-[a-z0-9]+$")] = None
    dcrdex: bool = False
    bitcoin: bool = False
    skip_pgp: bool = False
    force_download: bool = False
    allow_running: bool = False
    download_only: bool = False
    skip_download: bool = False
    path: str | None = None
    create_wallet: bool = True
    manifests: ManifestSources = ManifestSources()

    @model_validator(mode="after")
    def _check_download_modes(self) -> "Settings":
        if self.skip_download and not self.path:
            msg = "must provide download path when skipping downloads"
            raise ValueError(msg)
        if self.skip_download and self.download_only:
            msg = "download-only and skip-download are mutually exclusive"
            raise ValueError(msg)
        return self

    @property
    def destination_path(self) -> Path:
        """Destination with ``~`` and variables expanded."""
        return expand_destination(self.destination)

    @property
    def local_path(self) -> Path | None:
        """Expanded local download directory, if any."""
        if self.path is None:
            return None
        return expand_destination(self.path)

    @property
    def families(self) -> list[str]:
        """Names of the families selected for this run, in install order."""
        names = ["decred"]
        if self.dcrdex:
            names.append("dcrdex")
        if self.bitcoin:
            names.append("bitcoin")
        return names


def _parse_bool(name: str, value: str) -> bool:
    lowered = value.strip().lower()
    if lowered in _TRUE_VALUES:
        return True
    if lowered in _FALSE_VALUES:
        return False
    msg = f"{name}: expected a boolean, got {value!r}"
    raise SettingsError(msg)


def settings_from_env(env: Mapping[str, str]) -> dict[str, Any]:
    """Collect settings overrides from ``DCRINSTALL_*`` environment variables.

    Args:
        env: Environment mapping (usually ``os.environ``).

    Returns:
        Dictionary of settings fields to override.

    Raises:
        SettingsError: If a boolean variable has an unrecognized value.
    """
    result: dict[str, Any] = {}
    for var, field_name in ENV_VARS.items():
        if var not in env:
            continue
        value = env[var]
        if field_name == "skip_pgp":
            result[field_name] = _parse_bool(var, value)
        elif value:
            result[field_name] = value
    return result


def _merge(base: dict[str, Any], overrides: Mapping[str, Any]) -> dict[str, Any]:
    """Merge overrides into base, recursing into nested tables."""
    merged = dict(base)
    for key, value in overrides.items():
        if isinstance(value, Mapping) and isinstance(merged.get(key), dict):
            merged[key] = _merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def _read_settings_file(path: Path) -> dict[str, Any]:
    try:
        with open(path, "rb") as f:
            return tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise SettingsError(f"Invalid TOML syntax in {path}: {e}") from e
    except OSError as e:
        raise SettingsError(f"Failed to read settings {path}: {e}") from e


def load_settings(
    path: Path | None = None,
    env: Mapping[str, str] | None = None,
    overrides: Mapping[str, Any] | None = None,
) -> Settings:
    """Resolve settings from file, environment and overrides.

    A missing settings file is not an error; defaults are used instead.

    Args:
        path: Settings file. If None, uses the default settings path.
        env: Environment mapping. If None, uses ``os.environ``.
        overrides: Highest priority values (from the command line).
            Nested ``manifests`` tables are merged per family.

    Returns:
        Validated, frozen Settings.

    Raises:
        SettingsError: If the file is unreadable or any value is invalid.
    """
    settings_path = path or get_settings_path()
    data: dict[str, Any] = {}
    if settings_path.exists():
        data = _read_settings_file(settings_path)
        logger.debug("Loaded settings from %s", settings_path)

    data = _merge(data, settings_from_env(os.environ if env is None else env))
    if overrides:
        data = _merge(data, overrides)

    try:
        return Settings.model_validate(data)
    except ValidationError as e:
        raise SettingsError(f"Invalid settings: {e}") from e


def settings_to_dict(settings: Settings) -> dict[str, Any]:
    """Convert Settings to a dictionary for TOML serialization.

    None values are omitted since TOML has no null.
    """
    return settings.model_dump(exclude_none=True)


def save_settings(settings: Settings, path: Path | None = None) -> Path:
    """Save settings to a TOML file.

    The file is written atomically by first writing to a temporary file
    and then using os.replace() for atomic rename.

    Args:
        settings: Settings to save.
        path: Destination file. If None, uses the default settings path.

    Returns:
        Path where the settings were saved.

    Raises:
        SettingsError: If the file cannot be written.
    """
    from tempfile import NamedTemporaryFile

    settings_path = path or get_settings_path()
    settings_path.parent.mkdir(parents=True, exist_ok=True)

    tmp_path: Path | None = None
    try:
        with NamedTemporaryFile(
            mode="wb",
            dir=settings_path.parent,
            delete=False,
            suffix=".tmp",
        ) as f:
            tmp_path = Path(f.name)
            tomli_w.dump(settings_to_dict(settings), f)
        os.replace(str(tmp_path), str(settings_path))
    except OSError as e:
        if tmp_path is not None and tmp_path.exists():
            tmp_path.unlink()
        raise SettingsError(f"Failed to write settings {settings_path}: {e}") from e

    return settings_path
