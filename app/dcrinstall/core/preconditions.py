"""Precondition checks run before anything is installed.

A family may only be installed or upgraded when:

1. none of its binaries are running,
2. either all or none of its versioned binaries are installed, and
3. either all or none of its config files exist.

Anything in between means a previous install was tampered with or broke
halfway, and the installer refuses to guess how to repair it.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import TYPE_CHECKING

from dcrinstall.core.errors import StateError
from dcrinstall.core.platform import executable_name
from dcrinstall.core.semver import SemVerError, extract_semver
from dcrinstall.models.state import BinaryStatus, ConfigStatus, InstallState

if TYPE_CHECKING:
    from dcrinstall.core.context import RunContext
    from dcrinstall.families.base import Family

logger = logging.getLogger(__name__)

HUMAN_INTERVENTION = (
    "dcrinstall requires all or none of the {kind} files to be installed. "
    "This is to prevent improper installations or upgrades. "
    "This upgrade/install requires human intervention."
)


class ProcessesRunningError(StateError):
    """Raised when binaries about to be replaced are still running."""

    def __init__(self, names: Sequence[str]) -> None:
        self.names = list(names)
        super().__init__(f"processes still running: {', '.join(self.names)}")


class InvalidVersionError(StateError):
    """Raised when an installed binary reports no semantic version."""

    def __init__(self, name: str, output: str) -> None:
        self.name = name
        self.output = output
        super().__init__(f"invalid version {name}: {output.strip()!r}")


class PartialInstallError(StateError):
    """Raised when only some of a family's binaries or configs are installed."""

    def __init__(self, kind: str, installed: Sequence[str], missing: Sequence[str]) -> None:
        self.kind = kind
        self.installed = list(installed)
        self.missing = list(missing)
        message = HUMAN_INTERVENTION.format(kind=kind)
        super().__init__(f"{message}\n\n{format_listing(self.installed, self.missing)}")


def format_listing(installed: Sequence[str], missing: Sequence[str]) -> str:
    """Format the installed and missing paths for an error message."""
    lines = ["Installed:"]
    lines.extend(f"  {item}" for item in installed)
    lines.append("Not installed:")
    lines.extend(f"  {item}" for item in missing)
    return "\n".join(lines)


def find_running(family: Family, context: RunContext) -> list[str]:
    """Names of the family's executables that are currently running."""
    running: list[str] = []
    for component in family.executable_components:
        if context.monitor.is_running(component.name):
            logger.info("Currently running: %s", component.name)
            running.append(component.name)
        else:
            logger.debug("Currently NOT running: %s", component.name)
    return running


def probe_binaries(family: Family, context: RunContext) -> tuple[BinaryStatus, ...]:
    """Run ``--version`` on every versioned binary in the destination.

    Raises:
        InvalidVersionError: If a binary runs but reports no version.
    """
    results: list[BinaryStatus] = []
    for component in family.versioned_components:
        path = context.destination / executable_name(component.name, context.host_tuple)
        output = context.version_prober(path)
        if output is None:
            logger.info("Currently not installed: %s", component.name)
            results.append(BinaryStatus(component.name, path))
            continue
        try:
            version = str(extract_semver(output))
        except SemVerError as e:
            raise InvalidVersionError(component.name, output) from e
        logger.info("Version installed %s: %s", component.name, version)
        results.append(BinaryStatus(component.name, path, version))
    return tuple(results)


def probe_configs(family: Family) -> tuple[ConfigStatus, ...]:
    """Check which of the family's config files exist."""
    results: list[ConfigStatus] = []
    for component in family.config_components:
        path = family.config_path(component)
        exists = path.exists()
        logger.debug("Config %s -- %s", path, "already installed" if exists else "NOT installed")
        results.append(ConfigStatus(component.name, path, exists))
    return tuple(results)


def inspect_state(family: Family, context: RunContext) -> InstallState:
    """Probe the local install state without enforcing any rule.

    Returns an uninspected state when the target platform is foreign.
    """
    if context.is_foreign:
        return InstallState(family=family.name, inspected=False)
    return InstallState(
        family=family.name,
        binaries=probe_binaries(family, context),
        configs=probe_configs(family),
        running=tuple(find_running(family, context)),
    )


def check_preconditions(family: Family, context: RunContext, bundle_version: str) -> InstallState:
    """Decide whether a family can be installed or upgraded.

    Args:
        family: Family about to be installed.
        context: Current run.
        bundle_version: Version about to be installed (for logging).

    Returns:
        The probed install state.

    Raises:
        ProcessesRunningError: If binaries are running and that is not allowed.
        InvalidVersionError: If an installed binary reports garbage.
        PartialInstallError: If binaries or configs are partially installed.
    """
    if context.is_foreign:
        logger.warning(
            "%s bundle installation on foreign OS (%s), skipping runtime checks",
            family.display_name,
            context.target_tuple,
        )
        return InstallState(family=family.name, inspected=False)

    running = find_running(family, context)
    if running:
        if not context.settings.allow_running:
            raise ProcessesRunningError(running)
        logger.warning("Replacing running binaries: %s", ", ".join(running))

    binaries = probe_binaries(family, context)
    state = InstallState(family=family.name, binaries=binaries, running=tuple(running))
    if not state.binaries_consistent:
        raise PartialInstallError(
            "binary",
            [str(b.path) for b in state.installed_binaries],
            [str(b.path) for b in state.missing_binaries],
        )

    versions = state.versions
    if len(versions) > 1:
        detail = "; ".join(f"{v}: {', '.join(names)}" for v, names in sorted(versions.items()))
        logger.warning("%s binaries report mixed versions (%s)", family.display_name, detail)

    configs = probe_configs(family)
    state = InstallState(
        family=family.name,
        binaries=binaries,
        configs=configs,
        running=tuple(running),
    )
    if not state.configs_consistent:
        raise PartialInstallError(
            "configuration",
            [str(c.path) for c in state.installed_configs],
            [str(c.path) for c in state.missing_configs],
        )

    if state.is_fresh_install:
        logger.info("Performing %s install: %s", family.display_name, bundle_version)
    else:
        current = ", ".join(sorted(versions))
        logger.info("Performing %s upgrade: %s -> %s", family.display_name, current, bundle_version)
    return state
