"""Unit tests for cli/display.py.

Tests for shared Rich display functions used by the install and status
commands.
"""

import io
from dataclasses import replace
from pathlib import Path

import pytest
from dcrinstall.cli.display import (
    create_state_table,
    format_status,
    print_run_summary,
)
from dcrinstall.core.context import PreparedBundle
from dcrinstall.core.orchestrator import RunResult
from dcrinstall.core.theme import get_theme
from dcrinstall.families import DecredFamily
from dcrinstall.models.manifest import ManifestEntry
from dcrinstall.models.state import BinaryStatus, ConfigStatus, InstallState, InstallStatus
from rich.console import Console

# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def bundle(tmp_path: Path) -> PreparedBundle:
    """A prepared Decred bundle."""
    return PreparedBundle(
        family="decred",
        entry=ManifestEntry(digest="ab" * 32, filename="decred-linux-amd64-v1.6.0.tar.gz"),
        version="v1.6.0",
        source_dir=tmp_path / "decred-linux-amd64-v1.6.0",
        archive=tmp_path / "decred-linux-amd64-v1.6.0.tar.gz",
    )


def _render(obj: object) -> str:
    buf = io.StringIO()
    Console(theme=get_theme(), file=buf, color_system=None, width=200).print(obj)
    return buf.getvalue()


def _capture(func: object, *args: object, **kwargs: object) -> str:
    """Capture Rich console output by temporarily replacing the console.

    Patches the module-level console used by display functions and captures
    output to a StringIO buffer.
    """
    import dcrinstall.cli.display as display_mod
    import dcrinstall.utils.formatting as fmt_mod

    buf = io.StringIO()
    test_console = Console(theme=get_theme(), file=buf, color_system=None, width=200)

    original_display_console = display_mod.console
    original_fmt_console = fmt_mod.console
    display_mod.console = test_console
    fmt_mod.console = test_console
    try:
        func(*args, **kwargs)  # type: ignore[operator]
    finally:
        display_mod.console = original_display_console
        fmt_mod.console = original_fmt_console

    return buf.getvalue()


# ===========================================================================
# create_state_table
# ===========================================================================


class TestCreateStateTable:
    """Tests for create_state_table."""

    def test_rows_for_binaries_and_configs(self) -> None:
        state = InstallState(
            family="decred",
            binaries=(
                BinaryStatus("dcrd", Path("/opt/decred/dcrd"), "v1.6.0"),
                BinaryStatus("dcrwallet", Path("/opt/decred/dcrwallet")),
            ),
            configs=(ConfigStatus("dcrd", Path("/home/u/.dcrd/dcrd.conf"), True),),
            running=("dcrd",),
        )

        table = create_state_table(DecredFamily(), state)
        output = _render(table)

        assert table.row_count == 3
        assert "Decred (inconsistent)" in output
        assert "v1.6.0" in output
        assert "dcrd.conf" in output
        assert "▲" in output

    def test_uninspected_state(self) -> None:
        table = create_state_table(DecredFamily(), InstallState("decred", inspected=False))

        assert table.row_count == 0
        assert "unknown" in _render(table)


# ===========================================================================
# format_status
# ===========================================================================


class TestFormatStatus:
    """Tests for format_status."""

    @pytest.mark.parametrize("status", list(InstallStatus))
    def test_every_status_has_a_style(self, status: InstallStatus) -> None:
        assert status.value in format_status(status)


# ===========================================================================
# print_run_summary
# ===========================================================================


class TestPrintRunSummary:
    """Tests for print_run_summary."""

    def test_install_summary(self, bundle: PreparedBundle) -> None:
        result = RunResult(
            bundles=(bundle,),
            installed={"decred": [Path("/opt/decred/dcrd"), Path("/opt/decred/dcrwallet")]},
            configs={"decred": [Path("/home/u/.dcrd/dcrd.conf")]},
            notices=("Start dcrlnd first.",),
        )

        output = _capture(print_run_summary, result)

        assert "decred v1.6.0" in output
        assert "downloaded, 2 files installed, 1 configs written" in output
        assert "Start dcrlnd first." in output
        assert "Installation complete." in output

    def test_cached_bundle(self, bundle: PreparedBundle) -> None:
        result = RunResult(bundles=(replace(bundle, cached=True),))

        assert "(cached" in _capture(print_run_summary, result)

    def test_download_only_summary(self, bundle: PreparedBundle) -> None:
        result = RunResult(bundles=(bundle,), download_only=True)

        output = _capture(print_run_summary, result)

        assert "Verified decred v1.6.0" in output
        assert "Nothing was installed." in output
        assert "Installation complete." not in output
