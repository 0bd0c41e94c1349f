"""Lazy, cached file preview windows.

``PreviewManager.get_window`` returns only the lines visible in the preview
pane. Small files are read once, highlighted as a whole, and kept in a
bounded LRU cache so later scrolling is a slice. Large files are never held
in memory: each request streams the file from the start, skips to the
scroll offset, and reads one pane worth of lines.

Scroll offsets are remembered per path for the whole session and are always
clamped so the pane stays filled when the file has enough lines.
"""

from __future__ import annotations

import itertools
import logging
from collections import OrderedDict
from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path

from .errors import FileUnreadableError
from .highlight import Highlighter, sanitize_terminal_text

logger = logging.getLogger(__name__)

BINARY_PROBE_BYTES = 4_096
CACHE_MAX_FILE_BYTES = 256_000
CACHE_MAX_ENTRIES = 64


@dataclass(frozen=True)
class PreviewWindow:
    """Visible preview lines plus the clamped scroll offset they start at."""

    path: Path
    lines: tuple[str, ...]
    scroll: int
    total_lines: int | None
    error: str | None = None
    binary: bool = False

    @classmethod
    def read_error(cls, path: Path, exc: FileUnreadableError) -> PreviewWindow:
        return cls(path=path, lines=(f"<{exc}>",), scroll=0, total_lines=None, error=str(exc))


def decode_text(data: bytes) -> str:
    """Decode file bytes with a tolerant encoding fallback order."""
    for encoding in ("utf-8", "utf-8-sig"):
        try:
            return data.decode(encoding)
        except UnicodeDecodeError:
            continue
    return data.decode("latin-1")


def clamp_scroll(scroll: int, total_lines: int, height: int) -> int:
    return min(max(0, scroll), max(0, total_lines - height))


def _strip_line_end(line: str) -> str:
    if line.endswith("\n"):
        line = line[:-1]
    if line.endswith("\r"):
        line = line[:-1]
    return line


def split_lines(text: str) -> list[str]:
    """Split ``text`` on ``\\n`` only, the same rule streamed reads and line counts use.

    Form feeds and other Unicode line separators stay inside their line.
    """
    lines = text.split("\n")
    if lines[-1] == "":
        lines.pop()
    return [_strip_line_end(line) for line in lines]


class PreviewManager:
    def __init__(
        self,
        highlighter: Highlighter,
        cache_max_file_bytes: int = CACHE_MAX_FILE_BYTES,
        cache_max_entries: int = CACHE_MAX_ENTRIES,
    ) -> None:
        self.highlighter = highlighter
        self.cache_max_file_bytes = cache_max_file_bytes
        self.cache_max_entries = max(1, cache_max_entries)
        self.scroll_positions: dict[Path, int] = {}
        self._cache: OrderedDict[Path, tuple[str, ...]] = OrderedDict()
        self._known_line_counts: dict[Path, int] = {}
        self._binary: set[Path] = set()

    # Scroll-position map

    def scroll_offset(self, path: Path) -> int:
        return self.scroll_positions.get(path, 0)

    def known_line_count(self, path: Path) -> int | None:
        cached = self._cache.get(path)
        if cached is not None:
            return len(cached)
        return self._known_line_counts.get(path)

    def scroll_by(self, path: Path, delta: int, height: int) -> int:
        """Shift the stored offset of ``path`` by ``delta`` lines and return it."""
        offset = max(0, self.scroll_offset(path) + delta)
        total = self.known_line_count(path)
        if total is not None:
            offset = clamp_scroll(offset, total, height)
        self.scroll_positions[path] = offset
        return offset

    def invalidate(self, path: Path) -> None:
        """Forget cached content for ``path``; its scroll offset is kept."""
        self._cache.pop(path, None)
        self._known_line_counts.pop(path, None)
        self._binary.discard(path)

    @property
    def cached_paths(self) -> tuple[Path, ...]:
        return tuple(self._cache)

    # Window loading

    def get_window(self, path: Path, scroll: int, height: int) -> PreviewWindow:
        """Return up to ``height`` display lines of ``path`` starting near ``scroll``.

        Read failures produce a one-line placeholder window instead of raising.
        """
        height = max(0, height)
        try:
            window = self._load_window(path, scroll, height)
        except FileUnreadableError as exc:
            logger.info("preview of %s failed: %s", path, exc.reason)
            return PreviewWindow.read_error(path, exc)
        self.scroll_positions[path] = window.scroll
        return window

    def _load_window(self, path: Path, scroll: int, height: int) -> PreviewWindow:
        cached = self._cached_lines(path)
        if cached is None:
            size, binary = self._probe(path)
            if size < self.cache_max_file_bytes:
                cached = self._read_all(path, binary)
                self._store(path, cached)
                if binary:
                    self._binary.add(path)
            else:
                return self._stream_window(path, scroll, height, binary)

        start = clamp_scroll(scroll, len(cached), height)
        return PreviewWindow(
            path=path,
            lines=cached[start : start + height],
            scroll=start,
            total_lines=len(cached),
            binary=path in self._binary,
        )

    def _cached_lines(self, path: Path) -> tuple[str, ...] | None:
        cached = self._cache.get(path)
        if cached is not None:
            self._cache.move_to_end(path)
        return cached

    def _store(self, path: Path, lines: tuple[str, ...]) -> None:
        self._cache[path] = lines
        self._cache.move_to_end(path)
        while len(self._cache) > self.cache_max_entries:
            evicted, _ = self._cache.popitem(last=False)
            self._binary.discard(evicted)

    def _probe(self, path: Path) -> tuple[int, bool]:
        """Return ``(size_bytes, looks_binary)`` for ``path``."""
        try:
            size = path.stat().st_size
            with path.open("rb") as handle:
                sample = handle.read(BINARY_PROBE_BYTES)
        except OSError as exc:
            raise FileUnreadableError(path, exc.strerror or str(exc)) from exc
        return size, b"\x00" in sample

    def _render(self, lines: Iterable[str], path: Path, binary: bool) -> list[str]:
        clean = [sanitize_terminal_text(line) for line in lines]
        if binary:
            return clean
        return self.highlighter.highlight(clean, path)

    def _read_all(self, path: Path, binary: bool) -> tuple[str, ...]:
        try:
            data = path.read_bytes()
        except OSError as exc:
            raise FileUnreadableError(path, exc.strerror or str(exc)) from exc
        text = data.decode("utf-8", errors="replace") if binary else decode_text(data)
        return tuple(self._render(split_lines(text), path, binary))

    def _read_slice(self, path: Path, start: int, count: int) -> list[str]:
        try:
            with path.open("rb") as handle:
                return [
                    _strip_line_end(line.decode("utf-8", errors="replace"))
                    for line in itertools.islice(handle, start, start + count)
                ]
        except OSError as exc:
            raise FileUnreadableError(path, exc.strerror or str(exc)) from exc

    def _count_lines(self, path: Path) -> int:
        try:
            with path.open("rb") as handle:
                total = sum(1 for _ in handle)
        except OSError as exc:
            raise FileUnreadableError(path, exc.strerror or str(exc)) from exc
        self._known_line_counts[path] = total
        return total

    def _note_short_read(self, path: Path, start: int, raw: list[str], height: int) -> None:
        """Record the line count once a read reaches end of file.

        An empty read from a non-zero offset only bounds the count, so it is
        not recorded.
        """
        if len(raw) < height and (raw or start == 0):
            self._known_line_counts[path] = start + len(raw)

    def _stream_window(self, path: Path, scroll: int, height: int, binary: bool) -> PreviewWindow:
        total = self._known_line_counts.get(path)
        start = clamp_scroll(scroll, total, height) if total is not None else max(0, scroll)

        raw = self._read_slice(path, start, height)
        self._note_short_read(path, start, raw, height)
        if len(raw) < height and start > 0:
            # Short read past the end: pull the window back so the pane fills.
            if raw:
                start = max(0, start - (height - len(raw)))
            else:
                start = clamp_scroll(start, self._count_lines(path), height)
            raw = self._read_slice(path, start, height)
            self._note_short_read(path, start, raw, height)

        total = self._known_line_counts.get(path)
        return PreviewWindow(
            path=path,
            lines=tuple(self._render(raw, path, binary)),
            scroll=start,
            total_lines=total,
            binary=binary,
        )
