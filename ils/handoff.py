"""Shell hand-off file.

The browser writes exactly one absolute path to ``HANDOFF_PATH`` right
before exiting; the shell function installed by ``ils-bin --install`` reads
it after the process ends, deletes it, and changes directory. A leftover file
from a crashed run is removed at startup so it cannot be read by mistake.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

from .errors import HandoffWriteError

logger = logging.getLogger(__name__)

HANDOFF_PATH = Path("/tmp/ils_cd")


def clear_stale_handoff(path: Path = HANDOFF_PATH) -> None:
    try:
        path.unlink()
    except FileNotFoundError:
        return
    except OSError as exc:
        logger.warning("cannot remove stale hand-off file %s: %s", path, exc)
        return
    logger.info("removed stale hand-off file %s", path)


def write_handoff(target: Path, path: Path = HANDOFF_PATH) -> str:
    """Write ``target`` as an absolute path and return the written text."""
    text = os.path.abspath(os.fspath(target))
    try:
        path.write_text(text, encoding="utf-8")
    except OSError as exc:
        raise HandoffWriteError(path, exc.strerror or str(exc)) from exc
    logger.info("handed off %s", text)
    return text


def read_handoff(path: Path = HANDOFF_PATH) -> str | None:
    try:
        return path.read_text(encoding="utf-8")
    except FileNotFoundError:
        return None


def shell_function(binary: str = "ils-bin", path: Path = HANDOFF_PATH) -> str:
    """Return the ``ils`` shell function that consumes the hand-off file."""
    return (
        "ils() {\n"
        f'    {binary} "$@"\n'
        f"    if [ -f {path} ]; then\n"
        f"        local target=$(cat {path})\n"
        f"        rm {path}\n"
        '        if [ -d "$target" ]; then\n'
        '            cd "$target"\n'
        "        else\n"
        '            echo "$target"\n'
        "        fi\n"
        "    fi\n"
        "}\n"
    )
