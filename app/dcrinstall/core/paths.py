"""Path management for dcrinstall.

Two kinds of directories live here:

- dcrinstall's own XDG directories (settings, user supplied public keys)
- per-application data directories of the installed components, where
  their configuration files are written

XDG defaults:
- Config: ~/.config/dcrinstall/
"""

import os
from pathlib import Path

from dcrinstall.core.platform import runtime_os

# Application identifier for directory naming
APP_NAME = "dcrinstall"

# Log file written under the destination directory on every run
LOG_FILENAME = "dcrinstaller.log"

# Default destination for installed binaries
DEFAULT_DESTINATION = "~/decred"


def _get_xdg_dir(env_var: str, default_subdir: str) -> Path:
    """Get XDG directory respecting environment variable override.

    Args:
        env_var: XDG environment variable name (e.g., "XDG_CONFIG_HOME").
        default_subdir: Default subdirectory under home (e.g., ".config").

    Returns:
        Path to the application-specific directory.
    """
    base = os.environ.get(env_var)
    if base:
        return Path(base) / APP_NAME
    return Path.home() / default_subdir / APP_NAME


def get_config_dir() -> Path:
    """Get the configuration directory path.

    Returns:
        Path to ~/.config/dcrinstall/ (or XDG_CONFIG_HOME/dcrinstall/).
    """
    return _get_xdg_dir("XDG_CONFIG_HOME", ".config")


def get_settings_path() -> Path:
    """Get the default settings file path.

    Returns:
        Path to ~/.config/dcrinstall/config.toml.
    """
    return get_config_dir() / "config.toml"


def get_user_keys_dir() -> Path:
    """Get the directory holding user supplied public keys.

    Returns:
        Path to ~/.config/dcrinstall/keys/.
    """
    return get_config_dir() / "keys"


def _ensure_dir(path: Path, name: str, mode: int = 0o777) -> Path:
    """Create directory if it doesn't exist.

    Args:
        path: Directory path to create.
        name: Human-readable name for error messages.
        mode: Permission bits for newly created directories.

    Returns:
        The created/existing directory path.

    Raises:
        RuntimeError: If directory cannot be created.
    """
    try:
        path.mkdir(mode=mode, parents=True, exist_ok=True)
    except PermissionError as e:
        msg = f"Cannot create {name} directory {path}: Permission denied"
        raise RuntimeError(msg) from e
    except OSError as e:
        msg = f"Cannot create {name} directory {path}: {e}"
        raise RuntimeError(msg) from e
    return path


def ensure_destination_dir(destination: Path) -> Path:
    """Create the install destination with owner-only permissions.

    Raises:
        RuntimeError: If the directory cannot be created.
    """
    return _ensure_dir(destination, "destination", mode=0o700)


def expand_destination(destination: str | Path) -> Path:
    """Expand ``~`` and environment variables in a destination path."""
    return Path(os.path.expandvars(os.path.expanduser(str(destination))))


# =============================================================================
# Component application-data directories
# =============================================================================


def app_data_dir(name: str, roaming: bool = False, goos: str | None = None) -> Path:
    """Get the per-application data directory of an installed component.

    Follows the convention used by the Decred daemons themselves:

    - Windows: ``%LOCALAPPDATA%\\Name`` (``%APPDATA%`` when roaming)
    - macOS: ``~/Library/Application Support/Name``
    - Plan 9: ``~/name``
    - Other POSIX: ``~/.name``

    Args:
        name: Application name (e.g. ``dcrd`` or ``bitcoin``).
        roaming: Use the roaming profile on Windows.
        goos: Go-style OS name. Defaults to the running OS.

    Returns:
        Path to the application data directory (not created).
    """
    goos = goos or runtime_os()
    name = name.lstrip(".")
    if not name:
        return Path(".")

    upper = name[0].upper() + name[1:]
    lower = name[0].lower() + name[1:]
    home = Path.home()

    if goos == "windows":
        env_var = "APPDATA" if roaming else "LOCALAPPDATA"
        base = os.environ.get(env_var) or os.environ.get("APPDATA")
        if base:
            return Path(base) / upper
        return home / upper
    if goos == "darwin":
        return home / "Library" / "Application Support" / upper
    if goos == "plan9":
        return home / lower
    return home / f".{lower}"

