"""Syntax highlighting for preview lines.

The preview manager depends on the ``Highlighter`` capability only, so tests
can substitute ``PlainHighlighter``. ``PygmentsHighlighter`` picks a lexer
from the file name and renders with a terminal formatter; files without a
known lexer come back unchanged.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Sequence
from pathlib import Path
from typing import Protocol

from pygments import highlight as pygments_highlight
from pygments.formatters import TerminalFormatter
from pygments.lexer import Lexer
from pygments.lexers import get_lexer_for_filename
from pygments.styles import get_style_by_name
from pygments.util import ClassNotFound

logger = logging.getLogger(__name__)

DEFAULT_STYLE = "monokai"
_CONTROL_RE = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f-\x9f]")


def sanitize_terminal_text(source: str) -> str:
    """Escape terminal control bytes to avoid side effects (bell, cursor moves, etc.)."""
    if _CONTROL_RE.search(source) is None:
        return source

    out: list[str] = []
    for ch in source:
        code = ord(ch)
        if ch in {"\n", "\r", "\t"}:
            out.append(ch)
            continue
        # C0 controls + DEL + C1 controls.
        if code < 32 or code == 127 or 0x80 <= code <= 0x9F:
            out.append(f"\\x{code:02x}")
            continue
        out.append(ch)
    return "".join(out)


class Highlighter(Protocol):
    def highlight(self, lines: Sequence[str], path: Path) -> list[str]:
        """Return display lines for ``lines`` of the file at ``path``."""
        ...


class PlainHighlighter:
    """Highlighter that returns lines unchanged."""

    def highlight(self, lines: Sequence[str], path: Path) -> list[str]:
        return list(lines)


def _normalize_style(style: str) -> str:
    try:
        get_style_by_name(style)
    except ClassNotFound:
        logger.warning("unknown pygments style %r, using %r", style, DEFAULT_STYLE)
        return DEFAULT_STYLE
    return style


class PygmentsHighlighter:
    """Pygments-backed highlighter with per-extension lexer caching."""

    def __init__(self, style: str = DEFAULT_STYLE) -> None:
        self.style = _normalize_style(style)
        self._formatter = TerminalFormatter(style=self.style)
        self._lexers: dict[str, Lexer | None] = {}

    @staticmethod
    def _lexer_key(path: Path) -> str:
        return path.suffix.lower() or path.name

    def lexer_for(self, path: Path) -> Lexer | None:
        key = self._lexer_key(path)
        if key in self._lexers:
            return self._lexers[key]
        try:
            lexer = get_lexer_for_filename(path.name, stripnl=False, stripall=False, ensurenl=False)
        except ClassNotFound:
            lexer = None
        self._lexers[key] = lexer
        return lexer

    def highlight(self, lines: Sequence[str], path: Path) -> list[str]:
        if not lines:
            return []
        lexer = self.lexer_for(path)
        if lexer is None:
            return list(lines)
        source = "\n".join(lines)
        rendered = pygments_highlight(source, lexer, self._formatter).split("\n")
        if rendered and rendered[-1] == "" and len(rendered) == len(lines) + 1:
            rendered.pop()
        if len(rendered) != len(lines):
            logger.debug("highlight line count mismatch for %s; showing plain text", path)
            return list(lines)
        return rendered
