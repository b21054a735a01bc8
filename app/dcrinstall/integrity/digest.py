"""SHA-256 digest checks for manifests and archives."""

import hashlib
import logging
from pathlib import Path

from dcrinstall.core.errors import IntegrityError

logger = logging.getLogger(__name__)

# Read archives in 1 MiB chunks
CHUNK_SIZE = 1 << 20


class DigestMismatchError(IntegrityError):
    """Raised when a file's SHA-256 does not match the expected digest."""

    def __init__(self, path: Path, expected: str, actual: str) -> None:
        self.path = path
        self.expected = expected
        self.actual = actual
        super().__init__(f"corrupt digest {path.name}: expected {expected}, got {actual}")


def sha256_file(path: Path) -> str:
    """Compute the lowercase hex SHA-256 of a file.

    Args:
        path: File to hash.

    Returns:
        64 character lowercase hex digest.

    Raises:
        IntegrityError: If the file cannot be read.
    """
    digest = hashlib.sha256()
    try:
        with open(path, "rb") as f:
            for chunk in iter(lambda: f.read(CHUNK_SIZE), b""):
                digest.update(chunk)
    except OSError as e:
        raise IntegrityError(f"cannot hash {path}: {e}") from e
    return digest.hexdigest()


def verify_digest(path: Path, expected_hex: str) -> str:
    """Check that a file hashes to ``expected_hex``.

    Args:
        path: File to check.
        expected_hex: Expected digest, hex in any case.

    Returns:
        The computed digest.

    Raises:
        DigestMismatchError: If the digests differ.
        IntegrityError: If the file cannot be read.
    """
    expected = expected_hex.strip().lower()
    actual = sha256_file(path)
    if actual != expected:
        logger.debug("Digest mismatch for %s: %s != %s", path, actual, expected)
        raise DigestMismatchError(path, expected, actual)
    logger.debug("Digest verified for %s", path.name)
    return actual
