"""Semantic version extraction.

Release archives and ``--version`` output embed a semantic version
somewhere in free-form text (``decred-linux-amd64-v1.6.0.tar.gz``,
``dcrd version 1.6.0+release (Go version go1.15)``). This module peels it
out.
"""

import re
from dataclasses import dataclass

_IDENT = r"(?:0|[1-9]\d*|\d*[a-zA-Z-][0-9a-zA-Z-]*)"

SEMVER_RE = re.compile(
    r"(?:v|release-v)?"
    r"(?P<major>0|[1-9]\d*)\.(?P<minor>0|[1-9]\d*)\.(?P<patch>0|[1-9]\d*)"
    rf"(?:-(?P<pre>{_IDENT}(?:\.{_IDENT})*))?"
    r"(?:\+(?P<build>[0-9a-zA-Z-]+(?:\.[0-9a-zA-Z-]+)*))?"
)


class SemVerError(ValueError):
    """Raised when a string carries no semantic version."""


@dataclass(frozen=True, slots=True)
class SemVer:
    """A parsed semantic version.

    Attributes:
        major: Major version number.
        minor: Minor version number.
        patch: Patch version number.
        pre_release: Pre-release identifier (without the leading ``-``).
        build: Build metadata (without the leading ``+``).
    """

    major: int
    minor: int
    patch: int
    pre_release: str = ""
    build: str = ""

    def __str__(self) -> str:
        pre = f"-{self.pre_release}" if self.pre_release else ""
        return f"v{self.major}.{self.minor}.{self.patch}{pre}"


def extract_semver(text: str) -> SemVer:
    """Extract the first semantic version found in ``text``.

    Args:
        text: Arbitrary text such as a filename or command output.

    Returns:
        The parsed SemVer. Its string form is ``vMAJOR.MINOR.PATCH[-PRE]``.

    Raises:
        SemVerError: If no semantic version is present.
    """
    match = SEMVER_RE.search(text)
    if match is None:
        msg = f"version string {text!r} does not follow semantic versioning requirements"
        raise SemVerError(msg)

    return SemVer(
        major=int(match.group("major")),
        minor=int(match.group("minor")),
        patch=int(match.group("patch")),
        pre_release=match.group("pre") or "",
        build=match.group("build") or "",
    )
