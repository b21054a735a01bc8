"""PGP signature verification.

Signatures are checked with GnuPG through python-gnupg against a single
ASCII-armored public key per product family. The key is imported into a
throwaway keyring so the user's own keyring is never read or modified.

Keys are looked up, in order, in:

1. ``~/.config/dcrinstall/keys/<family>.asc``
2. ``dcrinstall/data/keys/<family>.asc`` (bundled with the package)
"""

import logging
import tempfile
from collections.abc import Iterator
from contextlib import contextmanager
from importlib import resources
from pathlib import Path

import gnupg

from dcrinstall.core.errors import IntegrityError
from dcrinstall.core.paths import get_user_keys_dir

logger = logging.getLogger(__name__)

# python-gnupg is chatty at DEBUG
logging.getLogger("gnupg").setLevel(logging.INFO)

STATUS_PREFIX = "[GNUPG:] "

# ERRSIG return code for a public key algorithm gpg does not support
ERRSIG_UNSUPPORTED_ALGORITHM = "4"


class SignatureError(IntegrityError):
    """Raised when a signature does not verify against the public key."""

    def __init__(self, path: Path, status: str | None = None) -> None:
        self.path = path
        self.status = status
        detail = f" ({status})" if status else ""
        super().__init__(f"PGP signature incorrect for {path.name}{detail}")


class UnsupportedSignatureError(SignatureError):
    """Raised when gpg does not support the algorithm of a signature by the release key."""


class PublicKeyError(IntegrityError):
    """Raised when a family's public key is missing or cannot be imported."""


def user_key_path(family: str) -> Path:
    """Path of the user supplied public key for a family."""
    return get_user_keys_dir() / f"{family}.asc"


def load_public_key(family: str) -> str:
    """Load the ASCII-armored release key for a family.

    Args:
        family: Product family name.

    Returns:
        The armored key text.

    Raises:
        PublicKeyError: If no key is available for the family.
    """
    user_path = user_key_path(family)
    if user_path.is_file():
        logger.debug("Using user supplied key %s", user_path)
        try:
            return user_path.read_text(encoding="utf-8")
        except OSError as e:
            raise PublicKeyError(f"cannot read public key {user_path}: {e}") from e

    bundled = resources.files("dcrinstall.data").joinpath("keys").joinpath(f"{family}.asc")
    if bundled.is_file():
        logger.debug("Using bundled key for %s", family)
        return bundled.read_text(encoding="utf-8")

    msg = (
        f"no public key for {family}: place the armored release key at {user_path} "
        "or rerun with --skip-pgp"
    )
    raise PublicKeyError(msg)


@contextmanager
def _keyring(public_key: str) -> Iterator[gnupg.GPG]:
    """Yield a GPG instance whose keyring holds only ``public_key``."""
    with tempfile.TemporaryDirectory(prefix="dcrinstall-gpg-") as home:
        try:
            gpg = gnupg.GPG(gnupghome=home)
        except (OSError, ValueError) as e:
            raise IntegrityError(f"cannot run gpg: {e}") from e

        imported = gpg.import_keys(public_key)
        if not imported.count:
            raise PublicKeyError("public key could not be imported")
        logger.debug("Imported key(s): %s", ", ".join(imported.fingerprints))
        yield gpg


def _trusted_ids(gpg: gnupg.GPG) -> set[str]:
    """Key ids and fingerprints of every key and subkey in the keyring."""
    ids: set[str] = set()
    for key in gpg.list_keys():
        ids.update(value.upper() for value in (key.get("keyid"), key.get("fingerprint")) if value)
        for subkey in key.get("subkeys", []):
            ids.update(str(value).upper() for value in subkey[:1] + subkey[2:3] if value)
    return ids


def _is_trusted(key_id: str, trusted: set[str]) -> bool:
    # Status lines carry either a long key id or a full fingerprint
    key_id = key_id.upper()
    return any(key_id.endswith(t) or t.endswith(key_id) for t in trusted)


def _status_lines(output: str) -> Iterator[tuple[str, list[str]]]:
    for line in output.splitlines():
        parts = line[len(STATUS_PREFIX) :].split() if line.startswith(STATUS_PREFIX) else []
        if parts:
            yield parts[0], parts[1:]


def _check(gpg: gnupg.GPG, verified: gnupg.Verify, path: Path) -> None:
    """Classify a verification result, one signature at a time.

    The document passes if at least one signature is a good signature by
    the imported key. Other signers' signatures are ignored. A signature by
    the imported key that gpg cannot check because of an unsupported
    algorithm raises UnsupportedSignatureError, unless another signature
    by that key is bad.
    """
    trusted = _trusted_ids(gpg)
    good: list[str] = []
    bad: list[str] = []
    unsupported: list[str] = []
    for keyword, fields in _status_lines(verified.stderr or ""):
        key_id = fields[0] if fields else ""
        if not key_id:
            continue
        if keyword == "GOODSIG" and _is_trusted(key_id, trusted):
            good.append(key_id)
        elif keyword == "BADSIG" and _is_trusted(key_id, trusted):
            bad.append(key_id)
        elif keyword == "ERRSIG" and len(fields) > 5 and _is_trusted(key_id, trusted):
            if fields[5] == ERRSIG_UNSUPPORTED_ALGORITHM:
                unsupported.append(key_id)
            else:
                bad.append(key_id)
        elif keyword == "NO_PUBKEY":
            logger.debug("Ignoring signature on %s by unknown key %s", path.name, key_id)

    logger.debug("gpg output for %s: %s", path.name, verified.stderr)
    if good:
        logger.info("Good signature on %s by %s", path.name, good[0])
        return
    if unsupported and not bad:
        raise UnsupportedSignatureError(path, "unsupported algorithm")
    if bad:
        raise SignatureError(path, verified.status or "signature bad")
    raise SignatureError(path, "no signature by the release key")


def verify_detached_signature(signature: Path, content: Path, public_key: str) -> None:
    """Verify a detached signature over ``content``.

    Args:
        signature: Armored detached signature file (``*.asc``).
        content: The signed file.
        public_key: Armored public key the signature must be made with.

    Raises:
        UnsupportedSignatureError: If gpg does not support the signature algorithm.
        SignatureError: If there is no good signature by the key.
        PublicKeyError: If the key cannot be imported.
    """
    with _keyring(public_key) as gpg:
        with open(signature, "rb") as f:
            verified = gpg.verify_file(f, str(content))
        _check(gpg, verified, content)


def verify_attached_signature(path: Path, public_key: str) -> None:
    """Verify a clear-signed document such as ``SHA256SUMS.asc``.

    Documents signed by several builders pass when one of the signatures
    is a good signature by ``public_key``.

    Args:
        path: The clear-signed file.
        public_key: Armored public key the signature must be made with.

    Raises:
        UnsupportedSignatureError: If gpg does not support the signature algorithm.
        SignatureError: If there is no good signature by the key.
        PublicKeyError: If the key cannot be imported.
    """
    with _keyring(public_key) as gpg:
        with open(path, "rb") as f:
            verified = gpg.verify_file(f)
        _check(gpg, verified, path)
