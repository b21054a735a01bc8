"""Release manifest lookup.

This module exports the manifest locator and its errors.
"""

from dcrinstall.manifest.locator import (
    DEFAULT_POLICY,
    AmbiguousTupleError,
    LocatePolicy,
    ManifestError,
    ManifestFormatError,
    TupleNotFoundError,
    locate,
    parse_manifest,
)

__all__ = [
    "DEFAULT_POLICY",
    "AmbiguousTupleError",
    "LocatePolicy",
    "ManifestError",
    "ManifestFormatError",
    "TupleNotFoundError",
    "locate",
    "parse_manifest",
]
