"""Preview window loading, scroll clamping, caching and error placeholders."""

from __future__ import annotations

import tempfile
import unittest
from pathlib import Path

from ils.highlight import PlainHighlighter
from ils.preview import PreviewManager, clamp_scroll, decode_text, split_lines


class UpperHighlighter:
    def __init__(self) -> None:
        self.calls = 0

    def highlight(self, lines, path):
        self.calls += 1
        return [line.upper() for line in lines]


def _write_lines(path: Path, count: int) -> Path:
    path.write_text("".join(f"line {i}\n" for i in range(count)), encoding="utf-8")
    return path


class PreviewWindowTests(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.root = Path(self._tmp.name)

    def tearDown(self) -> None:
        self._tmp.cleanup()

    def test_scroll_past_end_is_clamped_for_cached_file(self) -> None:
        path = _write_lines(self.root / "big.txt", 1000)
        manager = PreviewManager(PlainHighlighter())

        window = manager.get_window(path, 995, 20)

        self.assertEqual(window.scroll, 980)
        self.assertEqual(window.total_lines, 1000)
        self.assertEqual(window.lines[0], "line 980")
        self.assertEqual(window.lines[-1], "line 999")
        self.assertEqual(len(window.lines), 20)
        self.assertEqual(manager.scroll_offset(path), 980)

    def test_streamed_file_retries_short_read_to_fill_pane(self) -> None:
        path = _write_lines(self.root / "big.txt", 1000)
        manager = PreviewManager(PlainHighlighter(), cache_max_file_bytes=0)

        window = manager.get_window(path, 995, 20)

        self.assertEqual(window.scroll, 980)
        self.assertEqual(len(window.lines), 20)
        self.assertEqual(window.lines[-1], "line 999")
        self.assertEqual(window.total_lines, 1000)
        self.assertEqual(manager.cached_paths, ())

    def test_streamed_file_far_past_end_still_fills_pane(self) -> None:
        path = _write_lines(self.root / "big.txt", 100)
        manager = PreviewManager(PlainHighlighter(), cache_max_file_bytes=0)

        window = manager.get_window(path, 5000, 10)

        self.assertEqual(window.scroll, 90)
        self.assertEqual(window.lines[0], "line 90")
        self.assertEqual(len(window.lines), 10)

    def test_streamed_file_with_unknown_total_reads_requested_window(self) -> None:
        path = _write_lines(self.root / "big.txt", 100)
        manager = PreviewManager(PlainHighlighter(), cache_max_file_bytes=0)

        window = manager.get_window(path, 10, 5)

        self.assertEqual(window.lines, ("line 10", "line 11", "line 12", "line 13", "line 14"))
        self.assertIsNone(window.total_lines)

    def test_short_file_shows_everything_from_top(self) -> None:
        path = _write_lines(self.root / "short.txt", 3)
        manager = PreviewManager(PlainHighlighter())

        window = manager.get_window(path, 50, 10)

        self.assertEqual(window.scroll, 0)
        self.assertEqual(window.lines, ("line 0", "line 1", "line 2"))

    def test_highlighter_output_is_used_and_cached(self) -> None:
        path = _write_lines(self.root / "code.txt", 5)
        highlighter = UpperHighlighter()
        manager = PreviewManager(highlighter)

        first = manager.get_window(path, 0, 2)
        second = manager.get_window(path, 2, 2)

        self.assertEqual(first.lines, ("LINE 0", "LINE 1"))
        self.assertEqual(second.lines, ("LINE 2", "LINE 3"))
        self.assertEqual(highlighter.calls, 1)

    def test_unreadable_file_becomes_placeholder_line(self) -> None:
        manager = PreviewManager(PlainHighlighter())
        missing = self.root / "missing.txt"

        window = manager.get_window(missing, 0, 10)

        self.assertEqual(len(window.lines), 1)
        self.assertTrue(window.lines[0].startswith("<error reading file: "))
        self.assertTrue(window.lines[0].endswith(">"))
        self.assertIsNotNone(window.error)

    def test_binary_file_is_sanitized_and_not_highlighted(self) -> None:
        path = self.root / "blob.bin"
        path.write_bytes(b"abc\x00def\x07\n")
        highlighter = UpperHighlighter()
        manager = PreviewManager(highlighter)

        window = manager.get_window(path, 0, 5)

        self.assertTrue(window.binary)
        self.assertEqual(window.lines, ("abc\\x00def\\x07",))
        self.assertEqual(highlighter.calls, 0)

    def test_form_feed_splits_lines_the_same_cached_or_streamed(self) -> None:
        path = self.root / "paged.txt"
        path.write_bytes(b"one\x0ctwo\r\nthree\xe2\x80\xa8four\n")
        expected = ("one\\x0ctwo", "three four")

        for label, manager in (
            ("cached", PreviewManager(PlainHighlighter())),
            ("streamed", PreviewManager(PlainHighlighter(), cache_max_file_bytes=0)),
        ):
            with self.subTest(path=label):
                window = manager.get_window(path, 0, 10)
                self.assertEqual(window.lines, expected)
                self.assertEqual(window.total_lines, 2)

    def test_split_lines_only_breaks_on_newline(self) -> None:
        self.assertEqual(split_lines("a\r\nb\x1cc\nd"), ["a", "b\x1cc", "d"])
        self.assertEqual(split_lines("a\n"), ["a"])
        self.assertEqual(split_lines(""), [])

    def test_cache_evicts_least_recently_used(self) -> None:
        paths = [_write_lines(self.root / f"f{i}.txt", 3) for i in range(3)]
        manager = PreviewManager(PlainHighlighter(), cache_max_entries=2)

        manager.get_window(paths[0], 0, 3)
        manager.get_window(paths[1], 0, 3)
        manager.get_window(paths[0], 0, 3)
        manager.get_window(paths[2], 0, 3)

        self.assertEqual(set(manager.cached_paths), {paths[0], paths[2]})

    def test_invalidate_reloads_changed_file(self) -> None:
        path = _write_lines(self.root / "edit.txt", 2)
        manager = PreviewManager(PlainHighlighter())
        manager.get_window(path, 0, 5)

        path.write_text("changed\n", encoding="utf-8")
        self.assertEqual(manager.get_window(path, 0, 5).lines, ("line 0", "line 1"))

        manager.invalidate(path)
        self.assertEqual(manager.get_window(path, 0, 5).lines, ("changed",))


class ScrollStateTests(unittest.TestCase):
    def test_scroll_by_clamps_once_line_count_is_known(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            path = _write_lines(Path(tmp) / "f.txt", 30)
            manager = PreviewManager(PlainHighlighter())
            manager.get_window(path, 0, 10)

            self.assertEqual(manager.scroll_by(path, 15, 10), 15)
            self.assertEqual(manager.scroll_by(path, 15, 10), 20)
            self.assertEqual(manager.scroll_by(path, -100, 10), 0)

    def test_scroll_offsets_are_remembered_per_path(self) -> None:
        manager = PreviewManager(PlainHighlighter())
        manager.scroll_by(Path("/a"), 7, 10)
        self.assertEqual(manager.scroll_offset(Path("/a")), 7)
        self.assertEqual(manager.scroll_offset(Path("/b")), 0)

    def test_clamp_scroll(self) -> None:
        self.assertEqual(clamp_scroll(995, 1000, 20), 980)
        self.assertEqual(clamp_scroll(-4, 1000, 20), 0)
        self.assertEqual(clamp_scroll(5, 3, 20), 0)

    def test_decode_text_falls_back_to_latin1(self) -> None:
        self.assertEqual(decode_text("héllo".encode("utf-8")), "héllo")
        self.assertEqual(decode_text(b"caf\xe9"), "café")


if __name__ == "__main__":
    unittest.main()
