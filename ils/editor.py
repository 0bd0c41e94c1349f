"""Editor launch helper for opening files in place.

Runs ``$EDITOR`` as a blocking child process while the TUI is suspended.
Problems that prevent the editor from starting raise ``EditorLaunchError``
before the terminal mode is touched whenever they can be detected early.
"""

from __future__ import annotations

import logging
import os
import shlex
import shutil
import subprocess
from collections.abc import Callable, Mapping
from pathlib import Path
from typing import Protocol

from .errors import EditorLaunchError

logger = logging.getLogger(__name__)


class EditorLauncher(Protocol):
    def launch(
        self,
        target: Path,
        disable_tui_mode: Callable[[], None],
        enable_tui_mode: Callable[[], None],
    ) -> int:
        """Edit ``target`` and return the editor's exit status."""
        ...


def editor_command(environ: Mapping[str, str]) -> list[str]:
    """Split ``$EDITOR`` into an argv prefix, raising ``EditorLaunchError`` when unusable."""
    editor_env = environ.get("EDITOR", "").strip()
    if not editor_env:
        raise EditorLaunchError("Cannot edit: $EDITOR is not set.")
    try:
        cmd = shlex.split(editor_env)
    except ValueError as exc:
        raise EditorLaunchError(f"Cannot edit: $EDITOR is malformed ({exc}).") from exc
    if not cmd:
        raise EditorLaunchError("Cannot edit: $EDITOR is empty.")
    if shutil.which(cmd[0]) is None:
        raise EditorLaunchError(f"Cannot edit: editor {cmd[0]!r} not found.")
    return cmd


class SubprocessEditorLauncher:
    def __init__(self, environ: Mapping[str, str] | None = None) -> None:
        self._environ = environ if environ is not None else os.environ

    def launch(
        self,
        target: Path,
        disable_tui_mode: Callable[[], None],
        enable_tui_mode: Callable[[], None],
    ) -> int:
        cmd = editor_command(self._environ)
        disable_tui_mode()
        try:
            completed = subprocess.run([*cmd, str(target)], check=False)
        except OSError as exc:
            raise EditorLaunchError(f"Failed to launch editor: {exc}") from exc
        finally:
            enable_tui_mode()
        logger.info("editor %s exited with status %d for %s", cmd[0], completed.returncode, target)
        return completed.returncode
