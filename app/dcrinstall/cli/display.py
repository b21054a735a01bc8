"""Shared Rich display functions for install state and run results.

Provides reusable table builders and summary printers for the install and
status commands.
"""

from rich.panel import Panel
from rich.table import Table

from dcrinstall.core.orchestrator import RunResult
from dcrinstall.families.base import Family
from dcrinstall.models.state import InstallState, InstallStatus
from dcrinstall.utils.formatting import (
    console,
    create_component_table,
    format_binary_row,
    print_info,
    print_success,
)

_STATUS_STYLES: dict[InstallStatus, str] = {
    InstallStatus.FULLY_INSTALLED: "installed",
    InstallStatus.NOTHING_INSTALLED: "muted",
    InstallStatus.INCONSISTENT: "error",
    InstallStatus.UNKNOWN: "warning",
}


def create_state_table(family: Family, state: InstallState) -> Table:
    """Create a table showing binaries and config files of one family.

    Args:
        family: Family the state belongs to.
        state: Probed install state.

    Returns:
        Rich Table with one row per binary and per config file.
    """
    table = create_component_table(f"{family.display_name} ({state.status.value})")

    for binary in state.binaries:
        table.add_row(*format_binary_row(binary, running=binary.name in state.running))

    for config in state.configs:
        if config.exists:
            icon = "[installed]●[/]"
        else:
            icon = "[missing]○[/]"
        table.add_row(icon, f"[muted]{config.path.name}[/]", "config", str(config.path))

    return table


def format_status(status: InstallStatus) -> str:
    """Format an install status with color markup."""
    style = _STATUS_STYLES[status]
    return f"[{style}]{status.value}[/{style}]"


def print_notices(notices: tuple[str, ...] | list[str]) -> None:
    """Print post-install notices, one panel each."""
    for notice in notices:
        console.print(Panel(notice, border_style="border", title="Notice", title_align="left"))


def print_run_summary(result: RunResult) -> None:
    """Print what a run did.

    Args:
        result: Result returned by the orchestrator.
    """
    if result.download_only:
        for bundle in result.bundles:
            print_info(f"Verified {bundle.family} {bundle.version}: {bundle.archive}")
        print_success("Download complete. Nothing was installed.")
        return

    for bundle in result.bundles:
        configs = result.configs.get(bundle.family, [])
        installed = result.installed.get(bundle.family, [])
        source = "cached" if bundle.cached else "downloaded"
        console.print(
            f"[component.name]{bundle.family}[/] [component.version]{bundle.version}[/] "
            f"[muted]({source}, {len(installed)} files installed, {len(configs)} configs written)[/]"
        )

    print_notices(result.notices)
    print_success("Installation complete.")
