"""Installing configs and binaries from a prepared bundle."""

from __future__ import annotations

import logging
import os
import shutil
from pathlib import Path
from typing import TYPE_CHECKING

from dcrinstall.core.errors import FilesystemError
from dcrinstall.core.platform import executable_name
from dcrinstall.core.templating import render_config

if TYPE_CHECKING:
    from dcrinstall.core.context import PreparedBundle, RunContext
    from dcrinstall.families.base import Family

logger = logging.getLogger(__name__)

CONFIG_DIR_MODE = 0o700
CONFIG_FILE_MODE = 0o600
BINARY_MODE = 0o755


class MissingSourceError(FilesystemError):
    """Raised when a component is missing from the extracted bundle."""

    def __init__(self, path: Path) -> None:
        self.path = path
        super().__init__(f"file not found: {path}")


def _write_private(path: Path, content: str) -> None:
    """Write a file readable only by the owner."""
    fd = os.open(path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, CONFIG_FILE_MODE)
    with os.fdopen(fd, "w", encoding="utf-8", newline="") as f:
        f.write(content)


def install_configs(family: Family, context: RunContext, bundle: PreparedBundle) -> list[Path]:
    """Generate the configs of a family that do not exist yet.

    Existing configs are never touched. Nothing is done when installing
    for a foreign platform.

    Args:
        family: Family being installed.
        context: Current run.
        bundle: Prepared bundle holding the sample configs.

    Returns:
        Paths of the configs written.

    Raises:
        ConfigTemplateError: If a sample lacks a required option.
        FilesystemError: If a sample cannot be read or a config cannot be written.
    """
    if context.is_foreign:
        logger.info("%s bundle installation on foreign OS, skipping configuration", family.display_name)
        return []

    written: list[Path] = []
    for component in family.config_components:
        dst = family.config_path(component)
        if dst.exists():
            logger.debug("Config %s exists, leaving it alone", dst)
            continue

        sample = family.load_sample(component, bundle)
        config = render_config(
            sample,
            family.config_overrides(component, context),
            name=component.config or component.name,
        )

        try:
            logger.info("Creating directory: %s", dst.parent)
            dst.parent.mkdir(mode=CONFIG_DIR_MODE, parents=True, exist_ok=True)
            logger.info("Installing configuration file: %s", dst)
            _write_private(dst, config)
        except OSError as e:
            raise FilesystemError(f"cannot write {dst}: {e}") from e
        written.append(dst)
    return written


def _remove(path: Path) -> None:
    if path.is_dir() and not path.is_symlink():
        shutil.rmtree(path)
    else:
        path.unlink()


def install_binaries(family: Family, context: RunContext, bundle: PreparedBundle) -> list[Path]:
    """Copy every component of a bundle into the destination.

    An installed copy is removed before the new one is copied. Setting the
    executable mode is best effort.

    Args:
        family: Family being installed.
        context: Current run.
        bundle: Prepared bundle to install from.

    Returns:
        Installed destination paths.

    Raises:
        MissingSourceError: If a component is missing from the bundle.
        FilesystemError: If a file cannot be removed or copied.
    """
    installed: list[Path] = []
    tuple_ = context.target_tuple
    for component in family.components:
        src = family.component_source(bundle.source_dir, component, tuple_)
        if component.directory:
            dst = context.destination / component.name
        else:
            dst = context.destination / executable_name(component.name, tuple_)

        if not src.exists():
            raise MissingSourceError(src)

        try:
            if dst.exists() or dst.is_symlink():
                _remove(dst)
        except OSError as e:
            raise FilesystemError(f"can't remove installed file {dst}: {e}") from e

        logger.info("Installing: %s", dst)
        try:
            if src.is_dir():
                shutil.copytree(src, dst)
            else:
                shutil.copy2(src, dst)
        except OSError as e:
            raise FilesystemError(f"cannot install {dst}: {e}") from e

        try:
            dst.chmod(BINARY_MODE)
        except OSError as e:
            logger.warning("Cannot set mode on %s: %s", dst, e)
        installed.append(dst)
    return installed
