"""Colors for cachectl's Rich output.

Defaults can be overridden per color in ``theme.toml`` under the config
directory, either at top level or in a ``[colors]`` table.
"""

import functools
import logging
import re
import tomllib
from pathlib import Path

from pydantic import BaseModel, ConfigDict, ValidationError, ValidationInfo, field_validator
from rich.theme import Theme

from cachectl.core.paths import get_config_dir

logger = logging.getLogger(__name__)

_HEX_COLOR = re.compile(r"#(?:[0-9a-fA-F]{3}){1,2}")

# Styles rendered bold on top of their base color.
_BOLD_STYLES = frozenset({"error", "failed"})


class ThemeColors(BaseModel):
    """Hex colors (#RGB or #RRGGBB) keyed by style name."""

    model_config = ConfigDict(extra="forbid")

    text: str = "#ffffff"
    muted: str = "#b2bec3"
    header: str = "#69B9A1"
    border: str = "#29526d"

    success: str = "#03b971"
    warning: str = "#f5b332"
    error: str = "#f53263"
    info: str = "#0ec1c8"

    linked: str = "#03b971"
    copied: str = "#faf870"
    failed: str = "#f53263"
    pending: str = "#0ec1c8"

    @field_validator("*", mode="before")
    @classmethod
    def _check_hex(cls, value: object, info: ValidationInfo) -> str:
        if not isinstance(value, str) or not _HEX_COLOR.fullmatch(value.strip()):
            msg = f"{info.field_name}: expected #RGB or #RRGGBB, got {value!r}"
            raise ValueError(msg)
        return value.strip()


def get_user_theme_path() -> Path:
    return get_config_dir() / "theme.toml"


def load_theme(path: Path | None = None) -> ThemeColors:
    """Load theme overrides from ``path`` (default: the user theme file).

    A missing file gives the defaults. An unreadable or invalid one is
    logged and also gives the defaults, so a bad theme never stops a sweep.
    """
    theme_path = path or get_user_theme_path()
    if not theme_path.exists():
        return ThemeColors()

    try:
        data = tomllib.loads(theme_path.read_text(encoding="utf-8"))
        return ThemeColors.model_validate(data.get("colors", data))
    except (tomllib.TOMLDecodeError, OSError) as e:
        logger.warning("Ignoring unreadable theme file %s: %s", theme_path, e)
    except ValidationError as e:
        logger.warning("Ignoring invalid theme file %s: %s", theme_path, e)
    return ThemeColors()


def get_rich_theme(colors: ThemeColors | None = None) -> Theme:
    """Build the Rich theme: one style per color plus ``bold_header`` and ``dim``."""
    colors = colors or load_theme()
    styles = {
        name: f"bold {value}" if name in _BOLD_STYLES else value
        for name, value in colors.model_dump().items()
    }
    styles["bold_header"] = f"bold {colors.header}"
    styles["dim"] = colors.muted
    return Theme(styles)


@functools.cache
def get_theme() -> Theme:
    """Rich theme for the shared consoles, loaded once per process."""
    return get_rich_theme()
