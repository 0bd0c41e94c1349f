"""Screen composition tests for ``build_frame_lines`` and the terminal writer."""

from __future__ import annotations

import os
import unittest
from pathlib import Path

from ils.directory_model import Entry
from ils.layout import GridShape, split_panes
from ils.preview import PreviewWindow
from ils.render import EMPTY_DIRECTORY_TEXT, HELP_TITLE, Frame, TerminalRenderer, build_frame_lines
from ils.ui_theme import PLAIN_THEME, theme_from_colors

ROOT = Path("/tmp/project")


def _entries(*names: str) -> tuple[Entry, ...]:
    return tuple(Entry(path=ROOT / name.rstrip("/"), is_dir=name.endswith("/")) for name in names)


def _frame(entries, grid, **overrides) -> Frame:
    height = overrides.pop("height", 10)
    preview_visible = overrides.pop("preview_visible", False)
    values = dict(
        width=80,
        height=height,
        current_dir=ROOT,
        entries=entries,
        selected=0,
        grid=grid,
        grid_start_row=0,
        geometry=split_panes(height, 0.5, preview_visible),
        preview_visible=preview_visible,
    )
    values.update(overrides)
    return Frame(**values)


class BuildFrameLinesTests(unittest.TestCase):
    def test_header_and_grid_cells(self) -> None:
        frame = _frame(_entries("a_dir/", "b.txt", "c.txt"), GridShape(cols=2, rows=2))

        lines = build_frame_lines(frame, PLAIN_THEME)

        self.assertEqual(len(lines), 10)
        self.assertEqual(lines[0], f" {ROOT} ")
        self.assertEqual(lines[1], "> " + "a_dir".ljust(20) + "  " + "b.txt".ljust(20))
        self.assertEqual(lines[2], "  " + "c.txt".ljust(20))
        self.assertEqual(lines[3], "")

    def test_selection_marker_follows_selected_index(self) -> None:
        frame = _frame(_entries("a", "b"), GridShape(cols=2, rows=1), selected=1)
        lines = build_frame_lines(frame, PLAIN_THEME)
        self.assertTrue(lines[1].startswith("  a"))
        self.assertIn("> b", lines[1])

    def test_directory_slash_suffix_is_optional(self) -> None:
        frame = _frame(_entries("src/"), GridShape(cols=1, rows=1), show_dir_slash=True)
        self.assertTrue(build_frame_lines(frame, PLAIN_THEME)[1].startswith("> src/"))

    def test_long_names_are_truncated_with_tilde(self) -> None:
        frame = _frame(_entries("x" * 40), GridShape(cols=1, rows=1))
        self.assertEqual(build_frame_lines(frame, PLAIN_THEME)[1], "> " + "x" * 19 + "~")

    def test_empty_directory_placeholder(self) -> None:
        frame = _frame((), GridShape(cols=1, rows=0))
        lines = build_frame_lines(frame, PLAIN_THEME)
        self.assertEqual(lines[1], EMPTY_DIRECTORY_TEXT)

    def test_grid_start_row_scrolls_rows(self) -> None:
        entries = _entries(*[f"f{i:02d}" for i in range(30)])
        frame = _frame(entries, GridShape(cols=1, rows=30), height=6, grid_start_row=10, selected=12)

        lines = build_frame_lines(frame, PLAIN_THEME)

        self.assertTrue(lines[1].startswith("  f10"))
        self.assertTrue(lines[3].startswith("> f12"))
        self.assertTrue(lines[4].startswith("  f13"))
        self.assertEqual(len(lines), 6)

    def test_preview_pane_separator_lines_and_footer(self) -> None:
        entries = _entries("notes.txt")
        window = PreviewWindow(path=ROOT / "notes.txt", lines=("first", "second"), scroll=0, total_lines=2)
        frame = _frame(entries, GridShape(cols=1, rows=1), preview_visible=True, preview=window)

        lines = build_frame_lines(frame, PLAIN_THEME)

        geometry = frame.geometry
        self.assertEqual(lines[geometry.separator_row], "─" * 80)
        self.assertEqual(lines[geometry.preview_top], "first")
        self.assertEqual(lines[geometry.preview_top + 1], "second")
        self.assertEqual(lines[geometry.footer_row], "notes.txt  [1-2/2]")

    def test_status_message_replaces_footer(self) -> None:
        frame = _frame(_entries("a"), GridShape(cols=1, rows=1), status="Cannot edit: $EDITOR is not set.")
        lines = build_frame_lines(frame, PLAIN_THEME)
        self.assertEqual(lines[-1], "Cannot edit: $EDITOR is not set.")

    def test_help_overlay_lists_bindings(self) -> None:
        rows = (("w, Up", "Move up"), ("q, Esc", "Quit"))
        frame = _frame(_entries("a"), GridShape(cols=1, rows=1), help_rows=rows, height=12)

        lines = build_frame_lines(frame, PLAIN_THEME)

        self.assertIn(HELP_TITLE, lines)
        self.assertTrue(any("w, Up" in line and "Move up" in line for line in lines))
        self.assertFalse(any(line.startswith("> a") for line in lines))

    def test_lines_are_clipped_to_width(self) -> None:
        frame = _frame(_entries("a", "b", "c", "d"), GridShape(cols=2, rows=2), width=10)
        for line in build_frame_lines(frame, PLAIN_THEME):
            self.assertLessEqual(len(line), 10)

    def test_colored_theme_wraps_cells_in_styles(self) -> None:
        theme = theme_from_colors({"directory_fg": "cyan", "selected_fg": "green"})
        frame = _frame(_entries("a/", "b/"), GridShape(cols=2, rows=1))

        line = build_frame_lines(frame, theme)[1]

        self.assertIn("> \033[92ma", line)
        self.assertIn("  \033[96mb", line)


class TerminalRendererTests(unittest.TestCase):
    def test_draw_writes_home_cursor_and_cleared_rows(self) -> None:
        read_fd, write_fd = os.pipe()
        try:
            renderer = TerminalRenderer(write_fd, PLAIN_THEME, lambda: (80, 4))
            self.assertEqual(renderer.terminal_size(), (80, 4))
            renderer.draw(_frame(_entries("a"), GridShape(cols=1, rows=1), height=4))
            payload = os.read(read_fd, 65536)
        finally:
            os.close(read_fd)
            os.close(write_fd)

        self.assertTrue(payload.startswith(b"\x1b[H"))
        self.assertEqual(payload.count(b"\x1b[K"), 4)
        self.assertIn(f" {ROOT} ".encode(), payload)


if __name__ == "__main__":
    unittest.main()
