"""Product families installable by dcrinstall.

This module exports the family classes and the lookup helpers.
"""

from dcrinstall.core.settings import Settings
from dcrinstall.families.base import Family
from dcrinstall.families.bitcoin import BitcoinFamily
from dcrinstall.families.dcrdex import DcrdexFamily
from dcrinstall.families.decred import DecredFamily

FAMILIES: dict[str, type[Family]] = {
    DecredFamily.name: DecredFamily,
    DcrdexFamily.name: DcrdexFamily,
    BitcoinFamily.name: BitcoinFamily,
}


def get_family(name: str) -> Family:
    """Instantiate a family by name.

    Raises:
        KeyError: If the family is unknown.
    """
    return FAMILIES[name]()


def get_families(settings: Settings) -> list[Family]:
    """Instantiate the families selected by the settings, in install order."""
    return [get_family(name) for name in settings.families]


__all__ = [
    "FAMILIES",
    "BitcoinFamily",
    "DcrdexFamily",
    "DecredFamily",
    "Family",
    "get_families",
    "get_family",
]
