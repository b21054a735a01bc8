"""Abstract base class for process liveness checks.

Binaries must not be replaced while they are running. This module defines
the ProcessMonitor interface that each platform implementation provides.
"""

from abc import ABC, abstractmethod

from dcrinstall.core.errors import InstallError


class ProcessCheckError(InstallError):
    """Raised when the running process list cannot be obtained."""


class ProcessMonitor(ABC):
    """Abstract base class for process monitors."""

    @abstractmethod
    def is_running(self, name: str) -> bool:
        """Check whether a process with this binary name is running.

        Args:
            name: Bare binary name without platform suffix.

        Returns:
            True if the process appears to be running.

        Raises:
            ProcessCheckError: If the check itself failed.
        """
