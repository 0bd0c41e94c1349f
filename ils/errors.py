"""Error taxonomy for the browser.

Every error carries a short human-readable message that can be shown in the
footer row. Only ``HandoffWriteError`` is fatal to the session.
"""

from __future__ import annotations

from pathlib import Path


class IlsError(Exception):
    """Base class for all ils errors."""


class DirectoryReadError(IlsError):
    """A directory could not be listed (missing, not a directory, no permission)."""

    def __init__(self, path: Path, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"Cannot open {path}: {reason}")


class FileUnreadableError(IlsError):
    """A file could not be opened or read for preview."""

    def __init__(self, path: Path, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"error reading file: {reason}")


class ConfigParseError(IlsError):
    """A config file exists but cannot be parsed or has invalid values."""

    def __init__(self, path: Path, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"Invalid config {path}: {reason}")


class EditorLaunchError(IlsError):
    """``$EDITOR`` is missing, unparseable, or could not be spawned."""


class HandoffWriteError(IlsError):
    """The shell hand-off file could not be written."""

    def __init__(self, path: Path, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"Cannot write hand-off file {path}: {reason}")
