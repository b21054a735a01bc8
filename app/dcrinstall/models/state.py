"""Install state models.

The install state of a family is derived on every run by probing the
destination directory and the application data directories. It is never
persisted.
"""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path


class InstallStatus(Enum):
    """Classification of a family's local installation."""

    NOTHING_INSTALLED = "nothing installed"
    FULLY_INSTALLED = "installed"
    INCONSISTENT = "inconsistent"
    UNKNOWN = "unknown"


@dataclass(frozen=True, slots=True)
class BinaryStatus:
    """Probe result for one versionable binary.

    Attributes:
        name: Component name.
        path: Path that was probed.
        version: Reported version (``vX.Y.Z``), or None when not installed.
    """

    name: str
    path: Path
    version: str | None = None

    @property
    def installed(self) -> bool:
        """Check if the binary answered the version probe."""
        return self.version is not None


@dataclass(frozen=True, slots=True)
class ConfigStatus:
    """Presence of one component configuration file."""

    name: str
    path: Path
    exists: bool


@dataclass(frozen=True, slots=True)
class InstallState:
    """Derived installation state of a product family.

    Attributes:
        family: Family name.
        binaries: Version probe result per versionable component.
        configs: Presence per component configuration file.
        running: Names of monitored processes found running.
        inspected: False when the target tuple is foreign and nothing was probed.
    """

    family: str
    binaries: tuple[BinaryStatus, ...] = field(default=())
    configs: tuple[ConfigStatus, ...] = field(default=())
    running: tuple[str, ...] = field(default=())
    inspected: bool = True

    @property
    def expected_binaries(self) -> int:
        """Number of versionable binaries in the catalogue."""
        return len(self.binaries)

    @property
    def installed_binaries(self) -> tuple[BinaryStatus, ...]:
        """Binaries that reported a version."""
        return tuple(b for b in self.binaries if b.installed)

    @property
    def missing_binaries(self) -> tuple[BinaryStatus, ...]:
        """Binaries that could not be invoked."""
        return tuple(b for b in self.binaries if not b.installed)

    @property
    def expected_configs(self) -> int:
        """Number of components that own a config file."""
        return len(self.configs)

    @property
    def installed_configs(self) -> tuple[ConfigStatus, ...]:
        """Config files present on disk."""
        return tuple(c for c in self.configs if c.exists)

    @property
    def missing_configs(self) -> tuple[ConfigStatus, ...]:
        """Config files not present on disk."""
        return tuple(c for c in self.configs if not c.exists)

    @property
    def versions(self) -> dict[str, list[str]]:
        """Installed versions mapped to the components reporting them."""
        result: dict[str, list[str]] = {}
        for binary in self.binaries:
            if binary.version is not None:
                result.setdefault(binary.version, []).append(binary.name)
        return result

    @property
    def binaries_consistent(self) -> bool:
        """All or none of the versionable binaries are installed."""
        installed = len(self.installed_binaries)
        return installed in (0, self.expected_binaries)

    @property
    def configs_consistent(self) -> bool:
        """All or none of the config files are installed."""
        installed = len(self.installed_configs)
        return installed in (0, self.expected_configs)

    @property
    def is_consistent(self) -> bool:
        """Check the all-or-nothing rule for both binaries and configs."""
        return self.binaries_consistent and self.configs_consistent

    @property
    def is_fresh_install(self) -> bool:
        """Check if no binary of the family is installed yet."""
        return not self.installed_binaries

    @property
    def status(self) -> InstallStatus:
        """Classify the state."""
        if not self.inspected:
            return InstallStatus.UNKNOWN
        if not self.is_consistent:
            return InstallStatus.INCONSISTENT
        if not self.installed_binaries and not self.installed_configs:
            return InstallStatus.NOTHING_INSTALLED
        return InstallStatus.FULLY_INSTALLED
