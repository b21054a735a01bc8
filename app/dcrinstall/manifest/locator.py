"""Release manifest parsing and platform lookup.

A manifest lists every build of a release, one ``<sha256> <filename>``
pair per line. Clear-signed manifests (``SHA256SUMS.asc``) are reduced to
their signed body before parsing.

Example:
    >>> entry = locate("linux-amd64", Path("decred-v1.6.0-manifest.txt"))
    >>> entry.filename
    'decred-linux-amd64-v1.6.0.tar.gz'
"""

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path

from dcrinstall.core.errors import InstallError
from dcrinstall.models.manifest import ManifestEntry

logger = logging.getLogger(__name__)

CLEARSIGN_HEADER = "-----BEGIN PGP SIGNED MESSAGE-----"
SIGNATURE_HEADER = "-----BEGIN PGP SIGNATURE-----"


class ManifestError(InstallError):
    """Base exception for manifest-related errors."""


class ManifestFormatError(ManifestError):
    """Raised when a manifest line does not have exactly two fields."""

    def __init__(self, path: Path, line: int, reason: str = "expected 2 fields") -> None:
        self.path = path
        self.line = line
        super().__init__(f"invalid manifest {path} line {line}: {reason}")


class TupleNotFoundError(ManifestError):
    """Raised when no manifest entry matches the requested tuple."""

    def __init__(self, tuple_: str, path: Path | None = None) -> None:
        self.tuple = tuple_
        self.path = path
        where = f" in {path}" if path is not None else ""
        super().__init__(f"os-arch tuple not found: {tuple_}{where}")


class AmbiguousTupleError(ManifestError):
    """Raised when more than one manifest entry matches the requested tuple."""

    def __init__(self, tuple_: str, path: Path, candidates: list[str]) -> None:
        self.tuple = tuple_
        self.path = path
        self.candidates = candidates
        super().__init__(
            f"os-arch tuple not unique: {tuple_} in {path} ({', '.join(candidates)})"
        )


@dataclass(frozen=True, slots=True)
class LocatePolicy:
    """Per-family rules for picking an archive out of a manifest.

    Attributes:
        needle_format: Substring a filename must contain. ``{tuple}`` is
            replaced by the (aliased) tuple. The trailing separator keeps
            ``arm`` from matching ``arm64``.
        aliases: Optional translation of ``os-arch`` tuples into the
            upstream naming. Tuples missing from the table are unsupported.
        excluded_suffixes: Filenames ending in one of these are skipped
            (installer executables, the non-preferred archive format).
        excluded_markers: Filenames containing one of these are skipped.
    """

    needle_format: str = "{tuple}-"
    aliases: Mapping[str, str] | None = None
    excluded_suffixes: tuple[str, ...] = field(default=(".zip", ".exe"))
    excluded_markers: tuple[str, ...] = field(default=())

    def needle(self, tuple_: str) -> str:
        """Return the substring to search for.

        Raises:
            TupleNotFoundError: If the tuple has no alias in the table.
        """
        name = tuple_
        if self.aliases is not None:
            if tuple_ not in self.aliases:
                raise TupleNotFoundError(tuple_)
            name = self.aliases[tuple_]
        return self.needle_format.format(tuple=name)

    def excludes(self, filename: str) -> bool:
        """Check whether a matching filename must be skipped anyway."""
        lowered = filename.lower()
        if any(lowered.endswith(suffix) for suffix in self.excluded_suffixes):
            return True
        return any(marker in lowered for marker in self.excluded_markers)


DEFAULT_POLICY = LocatePolicy()


def _signed_body(lines: list[str]) -> list[tuple[int, str]]:
    """Strip the clear-signature armor, keeping original line numbers.

    Args:
        lines: Raw manifest lines without line endings.

    Returns:
        ``(line_number, text)`` pairs of the signed body, dash-escaping undone.
    """
    body: list[tuple[int, str]] = []
    in_headers = True
    for number, line in enumerate(lines[1:], start=2):
        if in_headers:
            # Armor headers (Hash: ...) end at the first blank line
            if not line.strip():
                in_headers = False
            continue
        if line.startswith(SIGNATURE_HEADER):
            break
        if line.startswith("- "):
            line = line[2:]
        body.append((number, line))

    # The line break before the signature block belongs to the armor
    while body and not body[-1][1].strip():
        body.pop()
    return body


def read_manifest_lines(path: Path) -> list[tuple[int, str]]:
    """Read the data lines of a plain or clear-signed manifest.

    Args:
        path: Manifest file path.

    Returns:
        ``(line_number, text)`` pairs.

    Raises:
        ManifestError: If the file cannot be read or is not UTF-8.
    """
    try:
        text = path.read_text(encoding="utf-8")
    except UnicodeDecodeError as e:
        raise ManifestError(f"manifest {path} is not valid UTF-8: {e}") from e
    except OSError as e:
        raise ManifestError(f"failed to read manifest {path}: {e}") from e

    lines = text.splitlines()
    if lines and lines[0].strip() == CLEARSIGN_HEADER:
        return _signed_body(lines)
    return list(enumerate(lines, start=1))


def parse_manifest(path: Path) -> list[ManifestEntry]:
    """Parse every entry of a manifest.

    Args:
        path: Manifest file path.

    Returns:
        Entries in file order.

    Raises:
        ManifestFormatError: If a line does not hold exactly a digest and a filename.
        ManifestError: If the file cannot be read.
    """
    entries: list[ManifestEntry] = []
    for number, line in read_manifest_lines(path):
        fields = line.split()
        if len(fields) != 2:
            raise ManifestFormatError(path, number, f"expected 2 fields, got {len(fields)}")
        try:
            entries.append(ManifestEntry(digest=fields[0].lower(), filename=fields[1], line=number))
        except ValueError as e:
            raise ManifestFormatError(path, number, str(e)) from e
    return entries


def locate(
    tuple_: str,
    manifest_path: Path,
    policy: LocatePolicy = DEFAULT_POLICY,
) -> ManifestEntry:
    """Find the unique archive built for ``tuple_``.

    Args:
        tuple_: Platform tuple such as ``linux-amd64``.
        manifest_path: Manifest file to search.
        policy: Family specific matching and exclusion rules.

    Returns:
        The single matching ManifestEntry.

    Raises:
        ManifestFormatError: If any manifest line is malformed.
        TupleNotFoundError: If nothing matches after exclusions.
        AmbiguousTupleError: If more than one entry matches after exclusions.
    """
    if not tuple_:
        raise TupleNotFoundError(tuple_, manifest_path)

    try:
        needle = policy.needle(tuple_)
    except TupleNotFoundError:
        raise TupleNotFoundError(tuple_, manifest_path) from None

    matches: list[ManifestEntry] = []
    for entry in parse_manifest(manifest_path):
        if needle not in entry.filename:
            continue
        if policy.excludes(entry.filename):
            logger.debug("Skipping excluded manifest entry: %s", entry.filename)
            continue
        matches.append(entry)

    if not matches:
        raise TupleNotFoundError(tuple_, manifest_path)
    if len(matches) > 1:
        raise AmbiguousTupleError(tuple_, manifest_path, [m.filename for m in matches])

    logger.debug("Located %s for %s in %s", matches[0].filename, tuple_, manifest_path)
    return matches[0]
