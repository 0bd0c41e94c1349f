"""UI color palette built from ``colors.toml``.

Color strings are ``#RRGGBB``, ``#RGB``, a named terminal color, or ``none``
(terminal default). The resulting ``UITheme`` holds ready-to-print SGR
prefixes for each UI element.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass

from .ansi import RESET

_NAMED_FG = {
    "black": 30,
    "darkred": 31,
    "darkgreen": 32,
    "darkyellow": 33,
    "darkblue": 34,
    "darkmagenta": 35,
    "darkcyan": 36,
    "grey": 37,
    "gray": 37,
    "darkgrey": 90,
    "darkgray": 90,
    "red": 91,
    "green": 92,
    "yellow": 93,
    "blue": 94,
    "magenta": 95,
    "cyan": 96,
    "white": 97,
}


def parse_hex_color(value: str) -> tuple[int, int, int] | None:
    digits = value.strip().lstrip("#")
    try:
        if len(digits) == 6:
            return int(digits[0:2], 16), int(digits[2:4], 16), int(digits[4:6], 16)
        if len(digits) == 3:
            # #RGB expands each digit: 0xF -> 0xFF.
            return tuple(int(d, 16) * 17 for d in digits)  # type: ignore[return-value]
    except ValueError:
        return None
    return None


def color_sgr(value: str | None, *, background: bool = False) -> str:
    """Return the SGR escape for a color string, or ``""`` for none/unknown."""
    if not value:
        return ""
    name = value.strip().lower()
    if name.startswith("#"):
        rgb = parse_hex_color(name)
        if rgb is None:
            return ""
        r, g, b = rgb
        return f"\033[{48 if background else 38};2;{r};{g};{b}m"
    code = _NAMED_FG.get(name)
    if code is None:
        return ""
    return f"\033[{code + 10 if background else code}m"


@dataclass(frozen=True)
class UITheme:
    """Semantic ANSI palette used by the renderer."""

    header: str
    selected: str
    directory: str
    file: str
    preview_border: str
    empty: str
    status: str
    footer: str
    help_heading: str
    help_key: str
    reset: str = RESET


def theme_from_colors(colors: Mapping[str, str]) -> UITheme:
    header = color_sgr(colors.get("path_fg")) + color_sgr(colors.get("path_bg"), background=True)
    selected = color_sgr(colors.get("selected_fg")) or "\033[32m"
    selected += color_sgr(colors.get("selected_bg"), background=True)
    return UITheme(
        header=header or "\033[7m",
        selected=selected,
        directory=color_sgr(colors.get("directory_fg")) or "\033[34m",
        file="",
        preview_border=color_sgr(colors.get("preview_border_fg")) or "\033[90m",
        empty="\033[33m",
        status="\033[33m",
        footer="\033[90m",
        help_heading="\033[1;36m",
        help_key="\033[36m",
    )


PLAIN_THEME = UITheme(
    header="",
    selected="",
    directory="",
    file="",
    preview_border="",
    empty="",
    status="",
    footer="",
    help_heading="",
    help_key="",
    reset="",
)
