"""Abstract base class for product families.

A family is one independently released bundle (Decred, dcrdex, Bitcoin
Core). The install pipeline is the same for all of them; a family only
supplies its component catalogue and the hooks where the bundles differ:
manifest matching, archive layout, config overrides and post-install
steps.
"""

from abc import ABC, abstractmethod
from importlib import resources
from pathlib import Path
from typing import ClassVar

from dcrinstall.core.context import PreparedBundle, RunContext
from dcrinstall.core.errors import FilesystemError
from dcrinstall.core.paths import app_data_dir
from dcrinstall.core.platform import executable_name
from dcrinstall.core.semver import extract_semver
from dcrinstall.core.templating import Override
from dcrinstall.manifest.locator import DEFAULT_POLICY, LocatePolicy
from dcrinstall.models.component import ComponentDescriptor
from dcrinstall.models.manifest import ManifestEntry
from dcrinstall.transport.archive import strip_archive_suffix
from dcrinstall.transport.fetch import sibling_uri


class Family(ABC):
    """Base class for all product families.

    Example:
        >>> family = DecredFamily()
        >>> [c.name for c in family.versioned_components]
        ['dcrctl', 'dcrd', 'dcrwallet', 'dcrlnd', 'dcrlncli', 'politeiavoter']
    """

    #: Short identifier, also used for keys and settings (``decred``).
    name: ClassVar[str]
    #: Name shown to the user.
    display_name: ClassVar[str]
    #: Ordered component catalogue.
    components: ClassVar[tuple[ComponentDescriptor, ...]]
    #: Manifest matching rules.
    locate_policy: ClassVar[LocatePolicy] = DEFAULT_POLICY
    #: The manifest is clear-signed rather than accompanied by ``.asc``.
    attached_signature: ClassVar[bool] = False
    #: Signatures gpg cannot evaluate only produce a warning.
    tolerate_unsupported_signature: ClassVar[bool] = False
    #: Notice shown when a tolerated signature could not be checked.
    unverified_signature_notice: ClassVar[str] = ""
    #: Directory inside the extracted tree holding the binaries.
    binary_subdir: ClassVar[str] = ""

    # -------------------------------------------------------------------------
    # Catalogue views
    # -------------------------------------------------------------------------

    @property
    def versioned_components(self) -> tuple[ComponentDescriptor, ...]:
        """Components that answer ``--version``."""
        return tuple(c for c in self.components if c.supports_version)

    @property
    def executable_components(self) -> tuple[ComponentDescriptor, ...]:
        """Components that can run as a process."""
        return tuple(c for c in self.components if not c.directory)

    @property
    def config_components(self) -> tuple[ComponentDescriptor, ...]:
        """Components owning a config file."""
        return tuple(c for c in self.components if c.has_config)

    # -------------------------------------------------------------------------
    # Manifest and archive layout
    # -------------------------------------------------------------------------

    def signature_uri(self, manifest_uri: str) -> str | None:
        """URI of the detached manifest signature, or None if attached."""
        if self.attached_signature:
            return None
        return manifest_uri + ".asc"

    def archive_uri(self, manifest_uri: str, entry: ManifestEntry) -> str:
        """URI of the archive named by a manifest entry."""
        return sibling_uri(manifest_uri, entry.filename)

    def bundle_version(self, entry: ManifestEntry) -> str:
        """Extract the bundle version (``vX.Y.Z``) from the archive filename.

        Raises:
            SemVerError: If the filename carries no version.
        """
        return str(extract_semver(strip_archive_suffix(entry.filename)))

    def extracted_dir_name(self, entry: ManifestEntry) -> str:
        """Name of the top-level directory the archive extracts to."""
        return strip_archive_suffix(entry.filename)

    def component_source(self, source_dir: Path, component: ComponentDescriptor, tuple_: str) -> Path:
        """Path of a component inside the extracted tree."""
        base = source_dir / self.binary_subdir if self.binary_subdir else source_dir
        if component.directory:
            return base / component.name
        return base / executable_name(component.name, tuple_)

    def required_paths(self, tuple_: str) -> list[str]:
        """Paths, relative to the extracted directory, a usable tree must hold."""
        prefix = f"{self.binary_subdir}/" if self.binary_subdir else ""
        paths = [
            prefix + (c.name if c.directory else executable_name(c.name, tuple_))
            for c in self.components
        ]
        paths.extend(c.sample_filename for c in self.components if c.sample_filename)
        return paths

    # -------------------------------------------------------------------------
    # Configuration
    # -------------------------------------------------------------------------

    def config_path(self, component: ComponentDescriptor) -> Path:
        """Where a component's config file lives on this host."""
        if component.config is None:
            msg = f"{component.name} has no config file"
            raise ValueError(msg)
        return app_data_dir(component.app_name, roaming=component.roaming) / component.config

    def load_sample(self, component: ComponentDescriptor, bundle: PreparedBundle) -> str:
        """Read the sample config a component's config is generated from.

        Raises:
            FilesystemError: If the sample cannot be read.
        """
        if component.sample_resource is not None:
            resource = resources.files("dcrinstall.data").joinpath("samples").joinpath(
                component.sample_resource
            )
            try:
                return resource.read_text(encoding="utf-8")
            except OSError as e:
                raise FilesystemError(f"cannot read bundled sample {component.sample_resource}: {e}") from e

        if component.sample_filename is None:
            raise FilesystemError(f"{component.name} has no sample config")
        path = bundle.source_dir / component.sample_filename
        try:
            return path.read_text(encoding="utf-8")
        except OSError as e:
            raise FilesystemError(f"cannot read sample config {path}: {e}") from e

    @abstractmethod
    def config_overrides(self, component: ComponentDescriptor, context: RunContext) -> list[Override]:
        """Overrides applied to a component's sample config.

        Args:
            component: Component whose config is being generated.
            context: Current run.

        Returns:
            Overrides in match priority order.
        """

    # -------------------------------------------------------------------------
    # Hooks
    # -------------------------------------------------------------------------

    def post_config(self, context: RunContext, bundle: PreparedBundle) -> list[str]:
        """Run family specific steps after the configs are written.

        Returns:
            Notices to show the user when the run ends.
        """
        return []

    def post_install_notices(self, context: RunContext, bundle: PreparedBundle) -> list[str]:
        """Notices to show once the binaries are installed."""
        return []

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"
