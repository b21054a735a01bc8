"""Integrity verification: SHA-256 digests and PGP signatures."""

from dcrinstall.integrity.digest import DigestMismatchError, sha256_file, verify_digest
from dcrinstall.integrity.signature import (
    PublicKeyError,
    SignatureError,
    UnsupportedSignatureError,
    load_public_key,
    verify_attached_signature,
    verify_detached_signature,
)

__all__ = [
    "DigestMismatchError",
    "PublicKeyError",
    "SignatureError",
    "UnsupportedSignatureError",
    "load_public_key",
    "sha256_file",
    "verify_attached_signature",
    "verify_detached_signature",
    "verify_digest",
]
