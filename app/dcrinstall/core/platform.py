"""Platform tuple detection.

Release archives are named after Go-style ``os-arch`` tuples such as
``linux-amd64`` or ``windows-386``. This module maps the running
interpreter onto that convention.
"""

import platform
import sys

# Python machine names -> Go architecture names
_ARCH_ALIASES: dict[str, str] = {
    "x86_64": "amd64",
    "amd64": "amd64",
    "i386": "386",
    "i686": "386",
    "x86": "386",
    "aarch64": "arm64",
    "arm64": "arm64",
    "armv6l": "arm",
    "armv7l": "arm",
    "armv8l": "arm",
}

# sys.platform prefixes -> Go OS names
_OS_ALIASES: tuple[tuple[str, str], ...] = (
    ("linux", "linux"),
    ("darwin", "darwin"),
    ("win32", "windows"),
    ("cygwin", "windows"),
    ("freebsd", "freebsd"),
    ("openbsd", "openbsd"),
    ("netbsd", "netbsd"),
)


def runtime_os() -> str:
    """Return the Go-style operating system name of the running host."""
    for prefix, name in _OS_ALIASES:
        if sys.platform.startswith(prefix):
            return name
    return sys.platform


def runtime_arch() -> str:
    """Return the Go-style architecture name of the running host."""
    machine = platform.machine().lower()
    return _ARCH_ALIASES.get(machine, machine)


def runtime_tuple() -> str:
    """Return the ``os-arch`` tuple of the running host (e.g. ``linux-amd64``)."""
    return f"{runtime_os()}-{runtime_arch()}"


def tuple_os(tuple_: str) -> str:
    """Return the operating system part of an ``os-arch`` tuple."""
    return tuple_.split("-", 1)[0]


def is_windows_tuple(tuple_: str) -> bool:
    """Check whether a tuple targets Windows."""
    return tuple_.startswith("windows")


def executable_name(name: str, tuple_: str) -> str:
    """Apply the executable suffix convention of the target tuple.

    Args:
        name: Bare binary name (e.g. ``dcrd``).
        tuple_: Target ``os-arch`` tuple.

    Returns:
        ``name.exe`` for Windows tuples, ``name`` otherwise.
    """
    if is_windows_tuple(tuple_):
        return name + ".exe"
    return name
