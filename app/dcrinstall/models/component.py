"""Component descriptor model.

A component is one binary (or directory payload) shipped in a bundle,
together with the configuration file it owns. Each product family carries
a fixed, ordered catalogue of these descriptors that drives every loop of
the installer: liveness probes, version probes, config generation and
binary installation.
"""

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class ComponentDescriptor:
    """Static metadata for one installable component.

    Attributes:
        name: Binary filename without platform suffix (e.g. ``dcrd``).
        config: Config filename written to the app data directory, if any.
        sample_filename: Sample config shipped inside the extracted bundle.
        sample_resource: Sample config bundled with dcrinstall (``data/samples``).
        supports_version: Whether the binary answers ``--version``.
        directory: Whether the payload is a directory rather than an executable.
        config_folder: App data directory name when it differs from ``name``.
        roaming: Use the roaming profile on Windows for the app data directory.
    """

    name: str
    config: str | None = None
    sample_filename: str | None = None
    sample_resource: str | None = None
    supports_version: bool = False
    directory: bool = False
    config_folder: str | None = None
    roaming: bool = False

    def __post_init__(self) -> None:
        """Validate descriptor consistency."""
        if not self.name:
            msg = "Component name cannot be empty"
            raise ValueError(msg)
        if self.config and not (self.sample_filename or self.sample_resource):
            msg = f"Component {self.name} has a config but no sample to render it from"
            raise ValueError(msg)
        if self.directory and self.supports_version:
            msg = f"Directory component {self.name} cannot support --version"
            raise ValueError(msg)

    @property
    def has_config(self) -> bool:
        """Check if this component owns a configuration file."""
        return bool(self.config)

    @property
    def app_name(self) -> str:
        """Name of the application data directory for this component."""
        return self.config_folder or self.name
