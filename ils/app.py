"""Wire the real terminal, highlighter and editor into a browsing session."""

from __future__ import annotations

import logging
import sys
from pathlib import Path

from .config import AppConfig
from .controller import Controller
from .directory_model import DirectoryModel
from .editor import SubprocessEditorLauncher
from .highlight import PygmentsHighlighter
from .input import KeyBindingResolver, KeyEvent, read_key
from .preview import PreviewManager
from .render import TerminalRenderer
from .terminal import TerminalController
from .ui_theme import theme_from_colors

logger = logging.getLogger(__name__)


class TerminalKeySource:
    """Blocking key source reading decoded events from a raw-mode tty."""

    def __init__(self, stdin_fd: int) -> None:
        self.stdin_fd = stdin_fd

    def read_event(self) -> KeyEvent | None:
        return read_key(self.stdin_fd)


def run_browser(config: AppConfig, model: DirectoryModel) -> int:
    """Run an interactive session over ``model`` until it exits.

    ``model`` must already be loaded. Returns the process exit status.
    """
    stdin_fd = sys.stdin.fileno()
    stdout_fd = sys.stdout.fileno()
    terminal = TerminalController(stdin_fd, stdout_fd)
    renderer = TerminalRenderer(stdout_fd, theme_from_colors(config.colors), terminal.terminal_size)
    controller = Controller(
        config=config,
        model=model,
        preview=PreviewManager(PygmentsHighlighter(config.settings.style)),
        resolver=KeyBindingResolver(config.keybindings),
        renderer=renderer,
        key_source=TerminalKeySource(stdin_fd),
        terminal=terminal,
        editor=SubprocessEditorLauncher(),
    )
    logger.info("browsing %s", model.current_dir or Path.cwd())
    with terminal.raw_mode():
        return controller.run()
