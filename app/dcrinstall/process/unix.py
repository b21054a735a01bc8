"""Process monitor for POSIX systems based on ``ps``."""

import logging
import re
import subprocess

from dcrinstall.core.platform import runtime_os
from dcrinstall.process.base import ProcessCheckError, ProcessMonitor
from dcrinstall.utils.shell import run_command

logger = logging.getLogger(__name__)


def ps_args(goos: str | None = None) -> list[str]:
    """Return the ``ps`` invocation listing every process with full arguments.

    Linux wants the dashed form; the BSDs (and macOS) accept the bare one.
    """
    goos = goos or runtime_os()
    if goos == "linux":
        return ["ps", "-Aaww"]
    return ["ps", "Aaww"]


def name_pattern(name: str) -> re.Pattern[str]:
    """Match ``name`` as a whole word anywhere in a ``ps`` line."""
    return re.compile(rf"(?:^|\W){re.escape(name)}(?:$|\W)")


class PsProcessMonitor(ProcessMonitor):
    """Detects running processes by scanning ``ps`` output.

    The process list is read once per monitor and reused for every name.
    """

    def __init__(self, goos: str | None = None) -> None:
        self._goos = goos
        self._lines: list[str] | None = None

    def _process_lines(self) -> list[str]:
        if self._lines is None:
            args = ps_args(self._goos)
            try:
                result = run_command(args, timeout=30.0)
            except FileNotFoundError as e:
                raise ProcessCheckError("ps not found, cannot check for running processes") from e
            except (OSError, subprocess.TimeoutExpired) as e:
                raise ProcessCheckError(f"cannot list processes: {e}") from e
            if not result.success:
                msg = f"{' '.join(args)} failed: {result.stderr.strip()}"
                raise ProcessCheckError(msg)
            self._lines = result.stdout.splitlines()
        return self._lines

    def is_running(self, name: str) -> bool:
        pattern = name_pattern(name)
        for line in self._process_lines():
            if pattern.search(line):
                logger.debug("Found running process %s: %s", name, line.strip())
                return True
        return False
