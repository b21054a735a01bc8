"""Release manifest models."""

import re
from dataclasses import dataclass

_HEX_RE = re.compile(r"^[0-9a-fA-F]+$")


@dataclass(frozen=True, slots=True)
class ManifestEntry:
    """One ``<digest> <filename>`` line of a release manifest.

    Attributes:
        digest: Hex encoded SHA-256 digest of the file.
        filename: Archive filename relative to the release download URI.
        line: 1-based line number the entry was read from.
    """

    digest: str
    filename: str
    line: int = 0

    def __post_init__(self) -> None:
        """Validate entry data after initialization."""
        if not self.filename:
            msg = "Manifest filename cannot be empty"
            raise ValueError(msg)
        if not _HEX_RE.match(self.digest):
            msg = f"Manifest digest for {self.filename} is not hex: {self.digest!r}"
            raise ValueError(msg)
