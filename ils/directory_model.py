"""Directory listing and grid selection state.

``DirectoryModel`` owns the current directory, its visible entries, the
selected index, and the back-stack of directories entered with ``enter``.
Every failed load raises ``DirectoryReadError`` and leaves the model as it
was before the call.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from .errors import DirectoryReadError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Entry:
    """One visible directory child."""

    path: Path
    is_dir: bool

    @property
    def name(self) -> str:
        return self.path.name

    def display_name(self, show_dir_slash: bool = False) -> str:
        if self.is_dir and show_dir_slash:
            return f"{self.name}/"
        return self.name


class EnterResult(Enum):
    ENTERED = "entered"
    OPEN = "open"
    NONE = "none"


def absolute_path(path: Path) -> Path:
    """Return an absolute, normalized path without resolving symlinks."""
    return Path(os.path.abspath(os.path.expanduser(os.fspath(path))))


def list_directory(directory: Path, show_hidden: bool) -> list[Entry]:
    """List visible children sorted directories first, then by name.

    Raises ``DirectoryReadError`` when ``directory`` cannot be scanned.
    """
    entries: list[Entry] = []
    try:
        with os.scandir(directory) as children:
            for child in children:
                if not show_hidden and child.name.startswith("."):
                    continue
                try:
                    is_dir = child.is_dir()
                except OSError:
                    is_dir = False
                entries.append(Entry(path=directory / child.name, is_dir=is_dir))
    except FileNotFoundError as exc:
        raise DirectoryReadError(directory, "no such directory") from exc
    except NotADirectoryError as exc:
        raise DirectoryReadError(directory, "not a directory") from exc
    except PermissionError as exc:
        raise DirectoryReadError(directory, "permission denied") from exc
    except OSError as exc:
        raise DirectoryReadError(directory, exc.strerror or str(exc)) from exc

    entries.sort(key=lambda entry: (not entry.is_dir, entry.name))
    return entries


class DirectoryModel:
    def __init__(self, show_hidden: bool = False, home: Path | None = None) -> None:
        self.current_dir: Path | None = None
        self.entries: list[Entry] = []
        self.selected = 0
        self.show_hidden = show_hidden
        self.num_cols = 1
        self.back_stack: list[tuple[Path, int]] = []
        self._home = home

    @property
    def num_rows(self) -> int:
        return -(-len(self.entries) // max(1, self.num_cols))

    @property
    def selected_entry(self) -> Entry | None:
        if not self.entries:
            return None
        return self.entries[self.selected]

    def load(self, path: Path) -> None:
        """Replace the listing with ``path``'s children and select the first one."""
        target = absolute_path(path)
        entries = list_directory(target, self.show_hidden)
        self.current_dir = target
        self.entries = entries
        self.selected = 0
        logger.debug("loaded %s (%d entries)", target, len(entries))

    def _select_path(self, path: Path | None, fallback_index: int) -> None:
        if not self.entries:
            self.selected = 0
            return
        if path is not None:
            for idx, entry in enumerate(self.entries):
                if entry.path == path:
                    self.selected = idx
                    return
        self.selected = min(max(0, fallback_index), len(self.entries) - 1)

    def toggle_hidden(self) -> None:
        """Flip the hidden-entry filter and reload, keeping the selected path if listed."""
        if self.current_dir is None:
            self.show_hidden = not self.show_hidden
            return
        previous = self.selected_entry
        previous_index = self.selected
        self.show_hidden = not self.show_hidden
        try:
            entries = list_directory(self.current_dir, self.show_hidden)
        except DirectoryReadError:
            self.show_hidden = not self.show_hidden
            raise
        self.entries = entries
        self._select_path(previous.path if previous is not None else None, previous_index)

    def refresh(self) -> None:
        """Re-list the current directory, keeping the selected path when it still exists."""
        if self.current_dir is None:
            return
        previous = self.selected_entry
        entries = list_directory(self.current_dir, self.show_hidden)
        self.entries = entries
        self._select_path(previous.path if previous is not None else None, self.selected)

    def move_selection(self, delta_row: int, delta_col: int) -> None:
        """Move the selection across the row-major grid, stopping at its edges."""
        if not self.entries:
            self.selected = 0
            return
        cols = max(1, self.num_cols)
        row, col = divmod(self.selected, cols)
        new_row = min(max(0, row + delta_row), max(0, self.num_rows - 1))
        new_col = min(max(0, col + delta_col), cols - 1)
        target = new_row * cols + new_col
        if target < len(self.entries):
            self.selected = target

    def enter(self) -> EnterResult:
        """Descend into the selected directory, or report that a file should open."""
        entry = self.selected_entry
        if entry is None:
            return EnterResult.NONE
        if not entry.is_dir:
            return EnterResult.OPEN
        prior = (self.current_dir, self.selected)
        self.load(entry.path)
        if prior[0] is not None:
            self.back_stack.append(prior)
        return EnterResult.ENTERED

    def go_back(self) -> None:
        """Return to the previously entered directory, or the parent when there is none."""
        if self.back_stack:
            directory, selected = self.back_stack[-1]
            self.load(directory)
            self.back_stack.pop()
            self.selected = selected if selected < len(self.entries) else 0
            return

        if self.current_dir is None:
            return
        parent = self.current_dir.parent
        if parent == self.current_dir:
            return
        came_from = self.current_dir
        self.load(parent)
        self._select_path(came_from, 0)

    def go_home(self) -> None:
        home = self._home if self._home is not None else Path.home()
        self.load(home)
        self.back_stack.clear()
