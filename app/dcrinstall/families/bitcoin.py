"""Bitcoin Core bundle, used as the BTC wallet backend for dcrdex.

Bitcoin Core is released by a third party and follows its own
conventions: a clear-signed ``SHA256SUMS.asc`` signed by several builders,
platform names like ``x86_64-linux-gnu``, and archives that extract to
``bitcoin-<version>/bin``.
"""

import re

from dcrinstall.core.context import RunContext
from dcrinstall.core.semver import SemVerError, extract_semver
from dcrinstall.core.templating import Override
from dcrinstall.families.base import Family
from dcrinstall.manifest.locator import LocatePolicy
from dcrinstall.models.component import ComponentDescriptor
from dcrinstall.models.manifest import ManifestEntry

# os-arch tuple -> Bitcoin Core platform name
BITCOIN_TUPLES: dict[str, str] = {
    "darwin-amd64": "osx64",
    "windows-amd64": "win64",
    "linux-amd64": "x86_64-linux-gnu",
    "linux-arm": "arm-linux-gnueabihf",
    "linux-arm64": "aarch64-linux-gnu",
}

BITCOIN_VERSION_RE = re.compile(r"\d+\.\d+\.\d+")
BITCOIN_ARCHIVE_RE = re.compile(r"bitcoin-\d+\.\d+\.\d+")

BITCOIN_COMPONENTS: tuple[ComponentDescriptor, ...] = (
    ComponentDescriptor(name="bitcoin-cli", supports_version=True),
    ComponentDescriptor(
        name="bitcoind",
        config="bitcoin.conf",
        sample_resource="sample-bitcoin.conf",
        supports_version=True,
        config_folder="bitcoin",
        roaming=True,
    ),
)

UNVERIFIED_SIGNATURE_NOTICE = (
    "The bitcoin manifest signature could not be checked; the error that was "
    "logged is expected.\n\n"
    "The bitcoin archive was still validated against the manifest digest."
)


class BitcoinFamily(Family):
    """The optional Bitcoin Core bundle."""

    name = "bitcoin"
    display_name = "Bitcoin Core"
    components = BITCOIN_COMPONENTS
    locate_policy = LocatePolicy(
        needle_format="-{tuple}.",
        aliases=BITCOIN_TUPLES,
        excluded_suffixes=(".exe", ".dmg"),
        excluded_markers=("-debug",),
    )
    attached_signature = True
    tolerate_unsupported_signature = True
    unverified_signature_notice = UNVERIFIED_SIGNATURE_NOTICE
    binary_subdir = "bin"

    def bundle_version(self, entry: ManifestEntry) -> str:
        match = BITCOIN_VERSION_RE.search(entry.filename)
        if match is None:
            msg = f"can't extract bitcoin version from {entry.filename}"
            raise SemVerError(msg)
        return str(extract_semver(match.group(0)))

    def extracted_dir_name(self, entry: ManifestEntry) -> str:
        match = BITCOIN_ARCHIVE_RE.search(entry.filename)
        if match is None:
            msg = f"can't derive bitcoin directory from {entry.filename}"
            raise SemVerError(msg)
        return match.group(0)

    def config_overrides(self, component: ComponentDescriptor, context: RunContext) -> list[Override]:
        return [
            Override("#rpcuser=", context.credentials.username, required=True),
            Override("#rpcpassword=", context.credentials.password, required=True),
            Override("#server=", "1", required=True),
            Override("#prune=", "550", required=True),
            Override("#debug=", "rpc", required=True),
        ]
