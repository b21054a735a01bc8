"""Exception hierarchy shared by all install stages.

Every failure the installer can hit derives from :class:`InstallError`, so
the CLI can turn any of them into a single error line and a non-zero exit.
Module specific subclasses live next to the code that raises them.
"""


class InstallError(Exception):
    """Base exception for all dcrinstall failures."""


class TransportError(InstallError):
    """Raised when fetching a manifest, signature or archive fails."""

    def __init__(self, uri: str, reason: str) -> None:
        self.uri = uri
        self.reason = reason
        super().__init__(f"{uri}: {reason}")


class IntegrityError(InstallError):
    """Base exception for signature and digest failures."""


class StateError(InstallError):
    """Base exception for inconsistent local installation state.

    These always require human intervention; the installer never attempts
    to repair the state on its own.
    """


class FilesystemError(InstallError):
    """Raised when an expected file is missing or cannot be written."""


class StageError(InstallError):
    """Wraps a failure with the family and stage it happened in.

    Attributes:
        family: Product family name (e.g. ``decred``).
        stage: Human readable stage name (e.g. ``verify manifest``).
        cause: The original exception.
    """

    def __init__(self, family: str, stage: str, cause: Exception) -> None:
        self.family = family
        self.stage = stage
        self.cause = cause
        super().__init__(f"{family} {stage}: {cause}")
