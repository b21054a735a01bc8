"""Process liveness checks.

This module exports the ProcessMonitor interface and the factory picking
the implementation for the running host.
"""

from pathlib import Path

from dcrinstall.core.platform import runtime_os
from dcrinstall.process.base import ProcessCheckError, ProcessMonitor
from dcrinstall.process.unix import PsProcessMonitor
from dcrinstall.process.windows import LockProbeProcessMonitor


def get_process_monitor(destination: Path, goos: str | None = None) -> ProcessMonitor:
    """Return the process monitor suited to the running host.

    Args:
        destination: Install destination (used by the Windows lock probe).
        goos: Go-style OS name. Defaults to the running OS.
    """
    goos = goos or runtime_os()
    if goos == "windows":
        return LockProbeProcessMonitor(destination)
    return PsProcessMonitor(goos)


__all__ = [
    "LockProbeProcessMonitor",
    "ProcessCheckError",
    "ProcessMonitor",
    "PsProcessMonitor",
    "get_process_monitor",
]
