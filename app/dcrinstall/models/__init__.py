"""Data models for dcrinstall.

This module exports the core data structures used throughout the application.
"""

from dcrinstall.models.component import ComponentDescriptor
from dcrinstall.models.manifest import ManifestEntry
from dcrinstall.models.state import BinaryStatus, ConfigStatus, InstallState, InstallStatus

__all__ = [
    "BinaryStatus",
    "ComponentDescriptor",
    "ConfigStatus",
    "InstallState",
    "InstallStatus",
    "ManifestEntry",
]
