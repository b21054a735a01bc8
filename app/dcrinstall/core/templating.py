"""Config file generation from commented samples.

Sample configs ship every option commented out (``; rpcuser=`` for the
Decred tools, ``#rpcuser=`` for bitcoind). Generating a config means
uncommenting the handful of options the installer fills in and leaving
everything else untouched.
"""

import logging
from collections.abc import Sequence
from dataclasses import dataclass

from dcrinstall.core.errors import InstallError

logger = logging.getLogger(__name__)

COMMENT_CHARS = ";# "


class ConfigTemplateError(InstallError):
    """Raised when a required option is missing from a sample config."""


@dataclass(frozen=True, slots=True)
class Override:
    """Replace a commented sample line with a concrete setting.

    Attributes:
        directive: Line prefix to match, comment marker included (``; rpcuser=``).
        value: Value written after the uncommented directive.
        required: Fail if no sample line matches.
    """

    directive: str
    value: str
    required: bool = False

    @property
    def rendered(self) -> str:
        """The replacement line without its line ending."""
        return self.directive.lstrip(COMMENT_CHARS) + self.value

    def matches(self, line: str) -> bool:
        """Check whether a sample line holds this directive."""
        return line.lstrip().startswith(self.directive)


def render_config(sample: str, overrides: Sequence[Override], name: str = "config") -> str:
    """Apply overrides to a sample config.

    Each line is compared against the overrides in order; the first match
    is replaced by the override's rendered line. Lines that match nothing
    are copied verbatim, line endings included.

    Args:
        sample: Sample config text.
        overrides: Overrides to apply.
        name: Config name used in error messages.

    Returns:
        The generated config text.

    Raises:
        ConfigTemplateError: If a required override matched no line.
    """
    matched: set[int] = set()
    out: list[str] = []
    for line in sample.splitlines(keepends=True):
        for index, override in enumerate(overrides):
            if override.matches(line):
                out.append(override.rendered + "\n")
                matched.add(index)
                break
        else:
            out.append(line)

    missing = [o.directive for i, o in enumerate(overrides) if o.required and i not in matched]
    if missing:
        msg = f"{name}: sample is missing required option(s): {', '.join(missing)}"
        raise ConfigTemplateError(msg)

    logger.debug("Rendered %s with %d of %d overrides", name, len(matched), len(overrides))
    return "".join(out)
