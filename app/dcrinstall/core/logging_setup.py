"""Logging configuration.

Every run appends to ``<destination>/dcrinstaller.log`` at DEBUG level so
failures can be diagnosed after the fact. The terminal only shows what the
chosen verbosity asks for.
"""

import logging
from datetime import datetime
from pathlib import Path

from rich.logging import RichHandler

from dcrinstall.core.paths import LOG_FILENAME
from dcrinstall.utils.formatting import err_console

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

# Marker attribute so repeated setup calls replace our handlers only
_HANDLER_MARK = "_dcrinstall_handler"


def console_level(verbose: bool, quiet: bool) -> int:
    """Map the CLI verbosity flags to a log level for the terminal."""
    if quiet:
        return logging.ERROR
    if verbose:
        return logging.INFO
    return logging.WARNING


def _remove_own_handlers(root: logging.Logger) -> None:
    for handler in list(root.handlers):
        if getattr(handler, _HANDLER_MARK, False):
            root.removeHandler(handler)
            handler.close()


def setup_logging(destination: Path | None, verbose: bool = False, quiet: bool = False) -> Path | None:
    """Configure the ``dcrinstall`` logger hierarchy.

    Args:
        destination: Install destination holding the log file. If None,
            only the terminal handler is installed.
        verbose: Show INFO records on the terminal.
        quiet: Only show ERROR records on the terminal.

    Returns:
        Path to the log file, or None if no file handler was attached.
    """
    root = logging.getLogger("dcrinstall")
    _remove_own_handlers(root)
    root.setLevel(logging.DEBUG)
    root.propagate = False

    rich_handler = RichHandler(
        console=err_console,
        level=console_level(verbose, quiet),
        show_time=False,
        show_path=False,
        markup=False,
    )
    setattr(rich_handler, _HANDLER_MARK, True)
    root.addHandler(rich_handler)

    if destination is None:
        return None

    log_path = destination / LOG_FILENAME
    try:
        file_handler = logging.FileHandler(log_path, encoding="utf-8")
    except OSError as e:
        logger.warning("Cannot open log file %s: %s", log_path, e)
        return None
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(logging.Formatter(LOG_FORMAT))
    setattr(file_handler, _HANDLER_MARK, True)
    root.addHandler(file_handler)
    return log_path


def log_banner(event: str) -> None:
    """Write a run start or completion banner to the log."""
    stamp = datetime.now().strftime("%A, %d-%b-%y %H:%M:%S %Z").strip()
    logger.debug("=== dcrinstall %s %s ===", event, stamp)
