"""Color theme for dcrinstall output.

Colors come from the bundled ``data/theme.toml``; a user theme at
``~/.config/dcrinstall/theme.toml`` may override any of them.
"""

import logging
import tomllib
from importlib import resources
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, ValidationError, field_validator
from rich.theme import Theme

from dcrinstall.core.paths import get_config_dir

logger = logging.getLogger(__name__)

# Styles rendered in bold on top of their color
BOLD_STYLES = frozenset({"error", "running"})


class ThemeColors(BaseModel):
    """Colors used by the install and status output, as #RGB or #RRGGBB."""

    model_config = ConfigDict(extra="forbid")

    text: str = "#ffffff"
    muted: str = "#b2bec3"
    header: str = "#2ed6a1"
    border: str = "#2970ff"

    success: str = "#03b971"
    warning: str = "#f5b332"
    error: str = "#f53263"
    info: str = "#0ec1c8"

    installed: str = "#2ed6a1"
    missing: str = "#f5b332"
    running: str = "#f53263"
    cached: str = "#b2bec3"

    @field_validator("*", mode="before")
    @classmethod
    def validate_hex_color(cls, v: object, info: Any) -> str:
        if not isinstance(v, str):
            msg = f"{info.field_name}: color must be a string"
            raise ValueError(msg)
        color = v.strip()
        if not color.startswith("#"):
            msg = f"{info.field_name}: color must start with '#'"
            raise ValueError(msg)
        if len(color) not in (4, 7):
            msg = f"{info.field_name}: color must be #RGB or #RRGGBB format"
            raise ValueError(msg)
        try:
            int(color[1:], 16)
        except ValueError:
            msg = f"{info.field_name}: invalid hex color '{color}'"
            raise ValueError(msg) from None
        return color


def get_user_theme_path() -> Path:
    """Path of the user's theme overrides (``~/.config/dcrinstall/theme.toml``)."""
    return get_config_dir() / "theme.toml"


def _parse_colors(text: str, source: object) -> dict[str, str] | None:
    try:
        data = tomllib.loads(text)
    except tomllib.TOMLDecodeError as e:
        logger.warning("Failed to parse theme file %s: %s", source, e)
        return None
    colors = data.get("colors", {})
    if not isinstance(colors, dict):
        logger.warning("Invalid 'colors' section in %s", source)
        return None
    return {key: value for key, value in colors.items() if isinstance(value, str)}


def _load_toml_colors(path: Path) -> dict[str, str] | None:
    """Read the ``[colors]`` table of a theme file.

    Returns:
        Color name to hex value, or None if the file is missing or unreadable.
    """
    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        return None
    except OSError as e:
        logger.warning("Failed to read theme file %s: %s", path, e)
        return None
    return _parse_colors(text, path)


def load_theme() -> ThemeColors:
    """Load the bundled colors merged with the user's overrides.

    An invalid color anywhere falls back to the built-in defaults.
    """
    bundled = resources.files("dcrinstall.data").joinpath("theme.toml")
    colors = _parse_colors(bundled.read_text(encoding="utf-8"), "bundled theme") or {}

    user_path = get_user_theme_path()
    user_colors = _load_toml_colors(user_path)
    if user_colors is not None:
        logger.debug("Loaded user theme overrides from %s", user_path)
        colors.update(user_colors)

    try:
        return ThemeColors(**colors)
    except ValidationError as e:
        logger.warning("Theme validation failed, using defaults: %s", e)
        return ThemeColors()


def get_rich_theme(colors: ThemeColors | None = None) -> Theme:
    """Build the Rich theme: one style per color plus the table styles."""
    if colors is None:
        colors = load_theme()

    styles = {
        name: f"bold {value}" if name in BOLD_STYLES else value
        for name, value in colors.model_dump().items()
    }
    styles["bold_header"] = f"bold {colors.header}"
    styles["component.name"] = f"bold {colors.text}"
    styles["component.version"] = colors.muted
    return Theme(styles)


_cached_theme: Theme | None = None


def get_theme() -> Theme:
    """Get the Rich theme, loading it on first use."""
    global _cached_theme
    if _cached_theme is None:
        _cached_theme = get_rich_theme()
    return _cached_theme
