"""Transport: fetching files and unpacking release archives."""

from dcrinstall.transport.archive import ArchiveError, extract_archive, strip_archive_suffix
from dcrinstall.transport.fetch import Fetcher, sibling_uri, uri_basename

__all__ = [
    "ArchiveError",
    "Fetcher",
    "extract_archive",
    "sibling_uri",
    "strip_archive_suffix",
    "uri_basename",
]
