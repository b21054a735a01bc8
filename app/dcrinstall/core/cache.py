"""Extracted archive cache.

An archive that was already downloaded, verified and extracted into the
destination does not need to be fetched again. The extracted directory is
the only record; nothing else is persisted.
"""

import logging
from collections.abc import Iterable
from pathlib import Path

from dcrinstall.transport.archive import strip_archive_suffix

logger = logging.getLogger(__name__)


class ArtifactCache:
    """Answers whether an archive's extracted tree is already in place.

    A positive answer is only given when the tree is complete enough to
    install from. An incomplete or missing tree is simply fetched again.

    Args:
        destination: Directory archives are extracted into.
        force: Always report archives as unseen.
    """

    def __init__(self, destination: Path, force: bool = False) -> None:
        self.destination = destination
        self.force = force

    def extracted_path(self, archive_filename: str, extracted_dir: str | None = None) -> Path:
        """Return where an archive's contents live once extracted."""
        return self.destination / (extracted_dir or strip_archive_suffix(archive_filename))

    def seen_before(
        self,
        archive_filename: str,
        extracted_dir: str | None = None,
        required: Iterable[str] = (),
    ) -> bool:
        """Check whether an archive was previously extracted.

        Args:
            archive_filename: Archive filename from the manifest.
            extracted_dir: Directory name the archive extracts to, when it
                differs from the archive name without its extension.
            required: Paths, relative to the extracted directory, that must exist.

        Returns:
            True only if the directory exists, is not empty and holds every
            required path. Always False when ``force`` is set.
        """
        if self.force:
            return False

        path = self.extracted_path(archive_filename, extracted_dir)
        if not path.is_dir():
            return False
        if not any(path.iterdir()):
            logger.debug("Extracted directory %s is empty", path)
            return False

        missing = [rel for rel in required if not (path / rel).exists()]
        if missing:
            logger.debug("Extracted directory %s is incomplete: %s", path, ", ".join(missing))
            return False
        return True
