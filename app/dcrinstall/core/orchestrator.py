"""Install orchestration.

A run happens in three passes so that nothing is modified unless every
selected family can be installed:

1. Prepare each family: fetch and verify the manifest, locate the archive
   for the target platform, fetch, verify and extract it (unless a
   previous extraction can be reused) and check the preconditions.
2. Write missing configs and run each family's post-config steps.
3. Install the binaries of each family.

Any failure stops the run with a StageError naming the family and stage.
Nothing that was already written is rolled back; the precondition checks
of the next run will report what needs attention.
"""

import logging
from collections.abc import Iterator, Sequence
from contextlib import contextmanager
from dataclasses import dataclass, field, replace
from pathlib import Path

from dcrinstall.core.cache import ArtifactCache
from dcrinstall.core.context import PreparedBundle, RunContext
from dcrinstall.core.errors import InstallError, StageError
from dcrinstall.core.installer import install_binaries, install_configs
from dcrinstall.core.preconditions import check_preconditions
from dcrinstall.core.semver import SemVerError
from dcrinstall.families.base import Family
from dcrinstall.integrity.digest import verify_digest
from dcrinstall.integrity.signature import (
    UnsupportedSignatureError,
    load_public_key,
    verify_attached_signature,
    verify_detached_signature,
)
from dcrinstall.manifest.locator import locate
from dcrinstall.models.manifest import ManifestEntry
from dcrinstall.transport.archive import extract_archive
from dcrinstall.transport.fetch import uri_basename

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class RunResult:
    """Outcome of a successful run.

    Attributes:
        bundles: Prepared bundle per family, in install order.
        installed: Installed destination paths per family.
        configs: Config files written per family.
        notices: Messages for the user, in the order they were produced.
        download_only: True if the run stopped after verifying the archives.
    """

    bundles: tuple[PreparedBundle, ...] = ()
    installed: dict[str, list[Path]] = field(default_factory=dict)
    configs: dict[str, list[Path]] = field(default_factory=dict)
    notices: tuple[str, ...] = ()
    download_only: bool = False


@contextmanager
def _stage(family: Family, stage: str) -> Iterator[None]:
    """Attribute any installer failure inside the block to a family and stage."""
    logger.debug("%s: %s", family.name, stage)
    try:
        yield
    except StageError:
        raise
    except (InstallError, SemVerError) as e:
        raise StageError(family.name, stage, e) from e


class Orchestrator:
    """Runs the install pipeline for a set of families.

    Args:
        context: Current run.
        families: Families to install, in order. Decred comes first.
    """

    def __init__(self, context: RunContext, families: Sequence[Family]) -> None:
        self.context = context
        self.families = list(families)
        self.cache = ArtifactCache(context.destination, force=context.settings.force_download)
        self._notices: list[str] = []

    # -------------------------------------------------------------------------
    # Pass 1: prepare
    # -------------------------------------------------------------------------

    def fetch_manifest(self, family: Family) -> Path:
        """Fetch, digest-check and signature-check a family's manifest."""
        source = self.context.settings.manifests.for_family(family.name)
        manifest = self.context.work_dir / uri_basename(source.uri)

        with _stage(family, "fetch manifest"):
            self.context.fetcher.fetch(source.uri, manifest)

        if source.digest:
            with _stage(family, "verify manifest digest"):
                verify_digest(manifest, source.digest)

        if self.context.settings.skip_pgp:
            logger.warning("Skipping %s manifest signature check", family.display_name)
            return manifest

        with _stage(family, "verify manifest signature"):
            public_key = load_public_key(family.name)
            try:
                signature_uri = family.signature_uri(source.uri)
                if signature_uri is None:
                    verify_attached_signature(manifest, public_key)
                else:
                    signature = self.context.work_dir / uri_basename(signature_uri)
                    self.context.fetcher.fetch(signature_uri, signature)
                    verify_detached_signature(signature, manifest, public_key)
            except UnsupportedSignatureError as e:
                if not family.tolerate_unsupported_signature:
                    raise
                logger.warning("Can't verify %s manifest: %s", family.display_name, e)
                if family.unverified_signature_notice:
                    self._notices.append(family.unverified_signature_notice)
        return manifest

    def fetch_archive(self, family: Family, manifest_uri: str, entry: ManifestEntry) -> Path:
        """Fetch an archive into the work directory and check its digest."""
        archive = self.context.work_dir / entry.filename
        with _stage(family, "fetch archive"):
            self.context.fetcher.fetch(family.archive_uri(manifest_uri, entry), archive)
        with _stage(family, "verify archive digest"):
            verify_digest(archive, entry.digest)
        return archive

    def prepare(self, family: Family) -> PreparedBundle:
        """Run pass 1 for one family."""
        context = self.context
        manifest_uri = context.settings.manifests.for_family(family.name).uri
        manifest = self.fetch_manifest(family)

        with _stage(family, "locate archive"):
            entry = locate(context.target_tuple, manifest, family.locate_policy)
            version = family.bundle_version(entry)
            extracted = family.extracted_dir_name(entry)
        logger.info("Attempting to upgrade to %s version: %s", family.display_name, version)

        source_dir = context.destination / extracted
        bundle = PreparedBundle(family=family.name, entry=entry, version=version, source_dir=source_dir)

        if context.settings.download_only:
            archive = self.fetch_archive(family, manifest_uri, entry)
            return replace(bundle, archive=archive)

        required = family.required_paths(context.target_tuple)
        if self.cache.seen_before(entry.filename, extracted, required):
            logger.info("Using cached archive: %s", entry.filename)
            bundle = replace(bundle, cached=True)
        else:
            archive = self.fetch_archive(family, manifest_uri, entry)
            with _stage(family, "extract archive"):
                extract_archive(archive, context.destination)
            bundle = replace(bundle, archive=archive)

        with _stage(family, "check preconditions"):
            state = check_preconditions(family, context, version)
        return replace(bundle, state=state)

    # -------------------------------------------------------------------------
    # Passes 2 and 3
    # -------------------------------------------------------------------------

    def configure(self, family: Family, bundle: PreparedBundle) -> list[Path]:
        """Run pass 2 for one family."""
        with _stage(family, "install configs"):
            written = install_configs(family, self.context, bundle)
        if self.context.is_foreign:
            return written
        with _stage(family, "post-config"):
            self._notices.extend(family.post_config(self.context, bundle))
        return written

    def install(self, family: Family, bundle: PreparedBundle) -> list[Path]:
        """Run pass 3 for one family."""
        with _stage(family, "install binaries"):
            installed = install_binaries(family, self.context, bundle)
        self._notices.extend(family.post_install_notices(self.context, bundle))
        return installed

    def run(self) -> RunResult:
        """Run the whole pipeline.

        Returns:
            RunResult describing what was done.

        Raises:
            StageError: On the first failure, naming family and stage.
        """
        self._notices = []
        bundles = [self.prepare(family) for family in self.families]

        if self.context.settings.download_only:
            for bundle in bundles:
                logger.info("Downloaded and verified: %s", bundle.archive)
            return RunResult(bundles=tuple(bundles), notices=tuple(self._notices), download_only=True)

        pairs = list(zip(self.families, bundles, strict=True))
        configs = {family.name: self.configure(family, bundle) for family, bundle in pairs}
        installed = {family.name: self.install(family, bundle) for family, bundle in pairs}

        return RunResult(
            bundles=tuple(bundles),
            installed=installed,
            configs=configs,
            notices=tuple(self._notices),
        )
