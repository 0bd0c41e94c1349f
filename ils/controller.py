"""Browser event loop and action dispatch.

The controller owns session state (browsing vs. help overlay, preview
visibility, preview ratio, grid scroll) and turns resolved actions into
calls on the directory model, the preview manager, the editor launcher, and
the shell hand-off. Every collaborator is injected so the loop can run
against fakes.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from enum import Enum
from pathlib import Path
from typing import Protocol

from .actions import ACTION_LABELS, BINDABLE_ACTIONS, Action
from .config import AppConfig
from .directory_model import DirectoryModel
from .editor import EditorLauncher
from .errors import DirectoryReadError, EditorLaunchError
from .handoff import write_handoff
from .input.keys import KeyBindingResolver, KeyEvent
from .layout import (
    GridShape,
    PaneGeometry,
    clamp_preview_ratio,
    max_columns,
    split_panes,
    square_grid_shape,
)
from .preview import PreviewManager, PreviewWindow
from .render import Frame, Renderer

logger = logging.getLogger(__name__)

PREVIEW_RATIO_STEP = 0.1


class BrowserState(Enum):
    BROWSING = "browsing"
    HELP = "help"
    EXITED = "exited"


class KeySource(Protocol):
    def read_event(self) -> KeyEvent | None:
        """Block for the next key event; ``None`` means input is closed."""
        ...


class TerminalModes(Protocol):
    def disable_tui_mode(self) -> None:
        ...

    def enable_tui_mode(self) -> None:
        ...


class Controller:
    def __init__(
        self,
        config: AppConfig,
        model: DirectoryModel,
        preview: PreviewManager,
        resolver: KeyBindingResolver,
        renderer: Renderer,
        key_source: KeySource,
        terminal: TerminalModes,
        editor: EditorLauncher,
        handoff: Callable[[Path], str] = write_handoff,
        save_preview_ratio: Callable[[float], None] | None = None,
    ) -> None:
        self.config = config
        self.model = model
        self.preview = preview
        self.resolver = resolver
        self.renderer = renderer
        self.key_source = key_source
        self.terminal = terminal
        self.editor = editor
        self._handoff = handoff
        self._save_preview_ratio = save_preview_ratio or config.save_preview_ratio

        self.state = BrowserState.BROWSING
        self.preview_visible = False
        self.preview_ratio = config.preview_ratio
        self.status = ""
        self.grid_start_row = 0
        self.handed_off: str | None = None

        self._size = (80, 24)
        self._grid = GridShape(cols=1, rows=0)
        self._geometry = split_panes(self._size[1], self.preview_ratio, self.preview_visible)

        self._handlers: dict[Action, Callable[[], None]] = {
            Action.MOVE_UP: lambda: self._move(-1, 0),
            Action.MOVE_DOWN: lambda: self._move(1, 0),
            Action.MOVE_LEFT: lambda: self._move(0, -1),
            Action.MOVE_RIGHT: lambda: self._move(0, 1),
            Action.ENTER: self._enter,
            Action.BACK: lambda: self._navigate(self.model.go_back),
            Action.HOME: lambda: self._navigate(self.model.go_home),
            Action.TOGGLE_HIDDEN: lambda: self._navigate(self.model.toggle_hidden),
            Action.TOGGLE_HELP: self._open_help,
            Action.TOGGLE_PREVIEW: self._toggle_preview,
            Action.SCROLL_PREVIEW_UP: lambda: self._scroll(-self.config.settings.preview_scroll_amount),
            Action.SCROLL_PREVIEW_DOWN: lambda: self._scroll(self.config.settings.preview_scroll_amount),
            Action.SCROLL_PREVIEW_FAST_UP: lambda: self._scroll(-self._geometry.preview_height),
            Action.SCROLL_PREVIEW_FAST_DOWN: lambda: self._scroll(self._geometry.preview_height),
            Action.INCREASE_PREVIEW_HEIGHT: lambda: self._change_preview_ratio(PREVIEW_RATIO_STEP),
            Action.DECREASE_PREVIEW_HEIGHT: lambda: self._change_preview_ratio(-PREVIEW_RATIO_STEP),
            Action.SELECT: self._select,
        }

    # Loop

    def run(self) -> int:
        """Render and dispatch key events until the session exits; returns the exit status."""
        while self.state is not BrowserState.EXITED:
            self.render()
            event = self.key_source.read_event()
            if event is None:
                logger.info("input closed; exiting")
                self.state = BrowserState.EXITED
                break
            self.handle_event(event)
        return 0

    def handle_event(self, event: KeyEvent) -> None:
        self.status = ""
        self.handle_action(self.resolver.resolve(event))

    def handle_action(self, action: Action) -> None:
        if self.state is BrowserState.EXITED:
            return
        if action is Action.QUIT:
            self.state = BrowserState.EXITED
            return
        if self.state is BrowserState.HELP:
            if action is Action.TOGGLE_HELP:
                self.state = BrowserState.BROWSING
            return
        handler = self._handlers.get(action)
        if handler is not None:
            handler()

    # Layout and rendering

    def _sync_layout(self) -> None:
        """Recompute grid shape, pane split, and the grid scroll offset."""
        width, height = self.renderer.terminal_size()
        self._size = (width, height)
        self._grid = square_grid_shape(len(self.model.entries), max_columns(width))
        self.model.num_cols = self._grid.cols
        self._geometry = split_panes(height, self.preview_ratio, self.preview_visible)

        visible_rows = max(1, self._geometry.grid_rows)
        row = self._grid.position(self.model.selected)[0] if self.model.entries else 0
        if row < self.grid_start_row:
            self.grid_start_row = row
        elif row >= self.grid_start_row + visible_rows:
            self.grid_start_row = row - visible_rows + 1
        self.grid_start_row = max(0, min(self.grid_start_row, self._grid.rows - visible_rows))

    def _preview_path(self) -> Path | None:
        if not self.preview_visible:
            return None
        entry = self.model.selected_entry
        if entry is None or entry.is_dir:
            return None
        return entry.path

    def _preview_window(self) -> PreviewWindow | None:
        path = self._preview_path()
        height = self._geometry.preview_height
        if path is None or height <= 0:
            return None
        return self.preview.get_window(path, self.preview.scroll_offset(path), height)

    def help_rows(self) -> tuple[tuple[str, str], ...]:
        return tuple(
            (", ".join(self.resolver.keys_for(action)) or "(unbound)", ACTION_LABELS[action])
            for action in BINDABLE_ACTIONS
        )

    def build_frame(self) -> Frame:
        self._sync_layout()
        in_help = self.state is BrowserState.HELP
        width, height = self._size
        return Frame(
            width=width,
            height=height,
            current_dir=self.model.current_dir or Path.cwd(),
            entries=tuple(self.model.entries),
            selected=self.model.selected,
            grid=self._grid,
            grid_start_row=self.grid_start_row,
            geometry=self._geometry,
            show_dir_slash=self.config.settings.show_dir_slash,
            preview_visible=self.preview_visible,
            preview=None if in_help else self._preview_window(),
            help_rows=self.help_rows() if in_help else None,
            status=self.status,
        )

    def render(self) -> None:
        self.renderer.draw(self.build_frame())

    @property
    def geometry(self) -> PaneGeometry:
        return self._geometry

    # Actions

    def _move(self, delta_row: int, delta_col: int) -> None:
        self._sync_layout()
        self.model.move_selection(delta_row, delta_col)

    def _navigate(self, operation: Callable[[], object]) -> None:
        try:
            operation()
        except DirectoryReadError as exc:
            logger.warning("%s", exc)
            self.status = str(exc)
            return
        self.grid_start_row = 0

    def _enter(self) -> None:
        entry = self.model.selected_entry
        if entry is None or not entry.is_dir:
            return
        self._navigate(self.model.enter)

    def _open_help(self) -> None:
        self.state = BrowserState.HELP

    def _toggle_preview(self) -> None:
        self.preview_visible = not self.preview_visible

    def _scroll(self, delta: int) -> None:
        path = self._preview_path()
        if path is None:
            return
        self._sync_layout()
        height = self._geometry.preview_height
        if height <= 0:
            return
        self.preview.scroll_by(path, delta, height)

    def _change_preview_ratio(self, delta: float) -> None:
        if not self.preview_visible:
            return
        ratio = round(clamp_preview_ratio(self.preview_ratio + delta), 2)
        if ratio == self.preview_ratio:
            return
        self.preview_ratio = ratio
        self._save_preview_ratio(ratio)

    def _select(self) -> None:
        entry = self.model.selected_entry
        if entry is None:
            # Empty directory: hand off the directory being shown.
            self._hand_off(self.model.current_dir or Path.cwd())
        elif entry.is_dir:
            self._hand_off(entry.path)
        else:
            self._edit(entry.path)

    def _hand_off(self, target: Path) -> None:
        self.handed_off = self._handoff(target)
        self.state = BrowserState.EXITED

    def _edit(self, path: Path) -> None:
        try:
            returncode = self.editor.launch(path, self.terminal.disable_tui_mode, self.terminal.enable_tui_mode)
        except EditorLaunchError as exc:
            logger.warning("%s", exc)
            self.status = str(exc)
            return

        self.preview.invalidate(path)
        try:
            self.model.refresh()
        except DirectoryReadError as exc:
            logger.warning("%s", exc)
            self.status = str(exc)
        if returncode != 0:
            self.status = f"Editor exited with status {returncode}"

        if self.config.settings.exit_after_edit:
            self._hand_off(self.model.current_dir or path.parent)
