"""Release archive extraction (``.tar.gz`` and ``.zip``)."""

import logging
import tarfile
import zipfile
from pathlib import Path

from dcrinstall.core.errors import InstallError

logger = logging.getLogger(__name__)

ARCHIVE_SUFFIXES: tuple[str, ...] = (".tar.gz", ".tgz", ".tar.bz2", ".tar.xz", ".tar", ".zip")


class ArchiveError(InstallError):
    """Raised when an archive cannot be read or would escape its destination."""


def strip_archive_suffix(filename: str) -> str:
    """Remove a known archive extension from a filename.

    Example:
        >>> strip_archive_suffix("decred-linux-amd64-v1.6.0.tar.gz")
        'decred-linux-amd64-v1.6.0'
    """
    lowered = filename.lower()
    for suffix in ARCHIVE_SUFFIXES:
        if lowered.endswith(suffix):
            return filename[: -len(suffix)]
    return filename


def _extract_tar(archive: Path, dest: Path) -> int:
    with tarfile.open(archive, "r:*") as tar:
        members = tar.getmembers()
        # The data filter rejects absolute paths, ".." and links leaving dest
        tar.extractall(dest, filter="data")
    return len(members)


def _extract_zip(archive: Path, dest: Path) -> int:
    root = dest.resolve()
    with zipfile.ZipFile(archive) as zf:
        infos = zf.infolist()
        for info in infos:
            target = (dest / info.filename).resolve()
            if not target.is_relative_to(root):
                raise ArchiveError(f"{archive.name}: member escapes destination: {info.filename}")
            zf.extract(info, dest)

            # zipfile drops permission bits; restore the executable ones
            mode = (info.external_attr >> 16) & 0o777
            if mode and not info.is_dir():
                target.chmod(mode)
    return len(infos)


def extract_archive(archive: Path, dest: Path) -> None:
    """Extract ``archive`` into ``dest``.

    Args:
        archive: Archive file; the format is chosen by extension.
        dest: Directory to extract into. Created if missing.

    Raises:
        ArchiveError: If the archive is corrupt, unsupported, or holds
            members that would land outside ``dest``.
    """
    logger.info("Extracting %s", archive.name)
    try:
        dest.mkdir(parents=True, exist_ok=True)
        if archive.name.lower().endswith(".zip"):
            count = _extract_zip(archive, dest)
        else:
            count = _extract_tar(archive, dest)
    except (tarfile.TarError, zipfile.BadZipFile) as e:
        raise ArchiveError(f"{archive.name}: {e}") from e
    except OSError as e:
        raise ArchiveError(f"cannot extract {archive.name} into {dest}: {e}") from e

    logger.debug("Extracted %d members from %s into %s", count, archive.name, dest)
