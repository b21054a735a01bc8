"""Process monitor for Windows based on executable file locks.

Windows locks the image of a running executable, so opening it for
writing fails with a sharing violation while the process is alive.
"""

import logging
from pathlib import Path

from dcrinstall.process.base import ProcessCheckError, ProcessMonitor

logger = logging.getLogger(__name__)


class LockProbeProcessMonitor(ProcessMonitor):
    """Detects running binaries under the destination by probing file locks.

    Only binaries installed in ``destination`` can be detected; a copy
    running from elsewhere is not seen.
    """

    def __init__(self, destination: Path) -> None:
        self.destination = destination

    def is_running(self, name: str) -> bool:
        path = self.destination / f"{name}.exe"
        try:
            with open(path, "r+b"):
                pass
        except FileNotFoundError:
            return False
        except PermissionError:
            logger.debug("%s is locked, assuming it is running", path)
            return True
        except OSError as e:
            raise ProcessCheckError(f"cannot probe {path}: {e}") from e
        return False
