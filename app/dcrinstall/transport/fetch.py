"""Fetching manifests, signatures and archives.

Remote URIs (``http``/``https``) are streamed with requests. ``file://``
URIs and plain paths are copied from the local filesystem, which is also
how ``--skip-download --path DIR`` runs are served.
"""

import logging
import os
import shutil
from pathlib import Path
from urllib.parse import unquote, urljoin, urlparse
from urllib.request import url2pathname

import requests

from dcrinstall import __version__
from dcrinstall.core.errors import TransportError

logger = logging.getLogger(__name__)

# Seconds to wait for a connection; reads block until the server is done
CONNECT_TIMEOUT = 30.0
CHUNK_SIZE = 1 << 16

_REMOTE_SCHEMES = frozenset({"http", "https"})


def _is_remote(uri: str) -> bool:
    return urlparse(uri).scheme in _REMOTE_SCHEMES


def _local_path(uri: str) -> Path:
    """Turn a ``file://`` URI or plain path into a Path."""
    parsed = urlparse(uri)
    if parsed.scheme == "file":
        return Path(url2pathname(unquote(parsed.path)))
    return Path(uri).expanduser()


def uri_basename(uri: str) -> str:
    """Return the last path element of a URI or path."""
    if _is_remote(uri) or uri.startswith("file:"):
        return unquote(urlparse(uri).path.rstrip("/").rsplit("/", 1)[-1])
    return Path(uri).name


def sibling_uri(uri: str, filename: str) -> str:
    """Return the URI of ``filename`` in the same directory as ``uri``.

    Archives are published next to their manifest, so the download URI is
    the manifest URI with its last element replaced.

    Example:
        >>> sibling_uri("https://host/rel/v1/manifest.txt", "a.tar.gz")
        'https://host/rel/v1/a.tar.gz'
    """
    if _is_remote(uri) or uri.startswith("file:"):
        return urljoin(uri, filename)
    return str(Path(uri).parent / filename)


class Fetcher:
    """Fetches a URI into a local file.

    Attributes:
        local_dir: When set, every fetch is served from this directory by
            basename and the network is never used.
    """

    def __init__(
        self,
        session: requests.Session | None = None,
        local_dir: Path | None = None,
    ) -> None:
        self._session = session
        self.local_dir = local_dir

    @property
    def session(self) -> requests.Session:
        """Lazily created HTTP session."""
        if self._session is None:
            self._session = requests.Session()
            self._session.headers["User-Agent"] = f"dcrinstall/{__version__}"
        return self._session

    def fetch(self, uri: str, dest: Path) -> Path:
        """Fetch ``uri`` into ``dest``.

        Args:
            uri: Remote URI, ``file://`` URI or local path.
            dest: Destination file. Parent directories must exist.

        Returns:
            The destination path.

        Raises:
            TransportError: On any network, HTTP status or file error.
        """
        if self.local_dir is not None:
            return self._copy(uri, self.local_dir / uri_basename(uri), dest)
        if _is_remote(uri):
            return self._download(uri, dest)
        return self._copy(uri, _local_path(uri), dest)

    def _copy(self, uri: str, source: Path, dest: Path) -> Path:
        logger.info("Copying %s", source)
        if not source.is_file():
            raise TransportError(uri, f"file not found: {source}")
        try:
            if source.resolve() != dest.resolve():
                shutil.copyfile(source, dest)
        except OSError as e:
            raise TransportError(uri, str(e)) from e
        return dest

    def _download(self, uri: str, dest: Path) -> Path:
        logger.info("Downloading %s", uri)
        partial = dest.with_name(dest.name + ".part")
        try:
            with self.session.get(uri, stream=True, timeout=(CONNECT_TIMEOUT, None)) as resp:
                if resp.status_code != 200:
                    raise TransportError(uri, f"HTTP status {resp.status_code} {resp.reason}")
                with open(partial, "wb") as f:
                    for chunk in resp.iter_content(chunk_size=CHUNK_SIZE):
                        f.write(chunk)
            os.replace(partial, dest)
        except requests.RequestException as e:
            raise TransportError(uri, str(e)) from e
        except OSError as e:
            raise TransportError(uri, f"cannot write {dest}: {e}") from e
        finally:
            if partial.exists():
                partial.unlink()

        logger.debug("Downloaded %s to %s", uri, dest)
        return dest
