"""Screen composition.

``build_frame_lines`` turns a ``Frame`` snapshot into one styled string per
terminal row and has no side effects. ``TerminalRenderer`` writes those rows
to the terminal; tests use a recording renderer instead.
"""

from __future__ import annotations

import os
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

from .ansi import clip_ansi_line, fit_cell
from .directory_model import Entry
from .layout import NAME_WIDTH, GridShape, PaneGeometry
from .preview import PreviewWindow
from .ui_theme import UITheme

EMPTY_DIRECTORY_TEXT = "  (empty directory)"
HELP_TITLE = "Interactive ls - Keys"
HELP_FOOTER = "Press the help key again to close."


@dataclass(frozen=True)
class Frame:
    """Everything needed to draw one screen."""

    width: int
    height: int
    current_dir: Path
    entries: tuple[Entry, ...]
    selected: int
    grid: GridShape
    grid_start_row: int
    geometry: PaneGeometry
    show_dir_slash: bool = False
    preview_visible: bool = False
    preview: PreviewWindow | None = None
    help_rows: tuple[tuple[str, str], ...] | None = None
    status: str = ""


class Renderer(Protocol):
    def terminal_size(self) -> tuple[int, int]:
        ...

    def draw(self, frame: Frame) -> None:
        ...


def _styled(style: str, text: str, theme: UITheme) -> str:
    if not style:
        return text
    return f"{style}{text}{theme.reset}"


def _grid_line(frame: Frame, row: int, theme: UITheme) -> str:
    cells: list[str] = []
    for col in range(frame.grid.cols):
        idx = row * frame.grid.cols + col
        if idx >= len(frame.entries):
            break
        entry = frame.entries[idx]
        name = fit_cell(entry.display_name(frame.show_dir_slash), NAME_WIDTH)
        if idx == frame.selected:
            cells.append("> " + _styled(theme.selected, name, theme))
        elif entry.is_dir:
            cells.append("  " + _styled(theme.directory, name, theme))
        else:
            cells.append("  " + _styled(theme.file, name, theme))
    return "".join(cells)


def _help_lines(frame: Frame, theme: UITheme) -> list[str]:
    rows = frame.help_rows or ()
    key_width = max((len(keys) for keys, _ in rows), default=0) + 2
    lines = ["", _styled(theme.help_heading, HELP_TITLE, theme), ""]
    for keys, label in rows:
        lines.append(f"  {_styled(theme.help_key, keys.ljust(key_width), theme)}-  {label}")
    lines.extend(["", HELP_FOOTER])
    return lines


def _footer_text(frame: Frame, theme: UITheme) -> str:
    if frame.status:
        return _styled(theme.status, frame.status, theme)
    preview = frame.preview
    if frame.preview_visible and preview is not None:
        shown = len(preview.lines)
        position = f"{preview.scroll + 1}-{preview.scroll + shown}" if shown else "0"
        total = f"/{preview.total_lines}" if preview.total_lines is not None else ""
        return _styled(theme.footer, f"{preview.path.name}  [{position}{total}]", theme)
    return ""


def build_frame_lines(frame: Frame, theme: UITheme) -> list[str]:
    """Compose ``frame.height`` rows, each clipped to ``frame.width`` columns."""
    width = max(1, frame.width)
    rows = [""] * max(1, frame.height)

    rows[0] = _styled(theme.header, f" {frame.current_dir} ", theme)

    if frame.help_rows is not None:
        for offset, line in enumerate(_help_lines(frame, theme), start=1):
            if offset >= len(rows):
                break
            rows[offset] = line
        return [clip_ansi_line(row, width) for row in rows]

    geometry = frame.geometry
    if not frame.entries:
        if geometry.grid_top < len(rows):
            rows[geometry.grid_top] = _styled(theme.empty, EMPTY_DIRECTORY_TEXT, theme)
    else:
        last_row = min(frame.grid.rows, frame.grid_start_row + geometry.grid_rows)
        for screen_row, grid_row in enumerate(range(frame.grid_start_row, last_row), start=geometry.grid_top):
            if screen_row >= len(rows):
                break
            rows[screen_row] = _grid_line(frame, grid_row, theme)

    if frame.preview_visible and geometry.separator_row is not None:
        rows[geometry.separator_row] = _styled(theme.preview_border, "─" * width, theme)
        lines = frame.preview.lines if frame.preview is not None else ()
        for i, line in enumerate(lines[: geometry.preview_height]):
            screen_row = geometry.preview_top + i
            if screen_row >= len(rows):
                break
            rows[screen_row] = line + theme.reset if "\x1b" in line else line

    if geometry.footer_row < len(rows) and geometry.footer_row > 0:
        footer = _footer_text(frame, theme)
        if footer:
            rows[geometry.footer_row] = footer

    return [clip_ansi_line(row, width) for row in rows]


class TerminalRenderer:
    """Write composed frames to a terminal file descriptor."""

    def __init__(
        self,
        stdout_fd: int,
        theme: UITheme,
        terminal_size: Callable[[], tuple[int, int]],
    ) -> None:
        self.stdout_fd = stdout_fd
        self.theme = theme
        self._terminal_size = terminal_size

    def terminal_size(self) -> tuple[int, int]:
        return self._terminal_size()

    def draw(self, frame: Frame) -> None:
        lines = build_frame_lines(frame, self.theme)
        payload = ("\x1b[H" + "\r\n".join(line + "\x1b[K" for line in lines)).encode("utf-8", errors="replace")
        view = memoryview(payload)
        while view:
            written = os.write(self.stdout_fd, view)
            view = view[written:]
