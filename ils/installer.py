"""One-time setup performed by ``ils-bin --install``.

Writes default configuration files that do not exist yet and appends the
``ils`` shell function to the user's shell startup file.
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import TextIO

from .config import (
    COLORS_FILENAME,
    CONFIG_DIR,
    DEFAULT_COLORS,
    DEFAULT_KEYBINDINGS,
    KEYBINDINGS_FILENAME,
    PREVIEW_RATIO_FILENAME,
    SETTINGS_FILENAME,
    Settings,
    save_colors,
    save_keybindings,
    save_settings,
)
from .handoff import shell_function
from .layout import DEFAULT_PREVIEW_RATIO

logger = logging.getLogger(__name__)

SHELL_RC_CANDIDATES = (".zshrc", ".bashrc")
SHELL_FUNCTION_MARKER = "ils-bin"
SHELL_FUNCTION_HEADER = "\n# Interactive ls (ils)\n"


def _write_defaults(config_dir: Path, out: TextIO) -> None:
    config_dir.mkdir(parents=True, exist_ok=True)
    print(f"✓ Config directory: {config_dir}", file=out)

    writers = (
        (KEYBINDINGS_FILENAME, "keybindings", lambda: save_keybindings(DEFAULT_KEYBINDINGS, config_dir)),
        (COLORS_FILENAME, "color config", lambda: save_colors(DEFAULT_COLORS, config_dir)),
        (SETTINGS_FILENAME, "settings", lambda: save_settings(Settings(), config_dir)),
    )
    for filename, label, write in writers:
        path = config_dir / filename
        if path.exists():
            print(f"✓ Keeping existing {label}: {path}", file=out)
            continue
        write()
        print(f"✓ Created default {label}: {path}", file=out)

    ratio_path = config_dir / PREVIEW_RATIO_FILENAME
    if ratio_path.exists():
        print(f"✓ Keeping existing preview ratio: {ratio_path}", file=out)
    else:
        ratio_path.write_text(f"{DEFAULT_PREVIEW_RATIO}", encoding="utf-8")
        print(f"✓ Created preview ratio config: {ratio_path}", file=out)


def detect_shell_rc(home: Path) -> Path | None:
    for name in SHELL_RC_CANDIDATES:
        candidate = home / name
        if candidate.exists():
            return candidate
    return None


def install(home: Path | None = None, config_dir: Path = CONFIG_DIR, out: TextIO | None = None) -> int:
    """Run the installer and return a process exit status."""
    out = out or sys.stdout
    home = home if home is not None else Path.home()
    print("Installing ils...\n", file=out)

    try:
        _write_defaults(config_dir, out)
    except OSError as exc:
        logger.error("install failed writing config: %s", exc)
        print(f"ils: cannot write configuration in {config_dir}: {exc}", file=sys.stderr)
        return 1

    shell_rc = detect_shell_rc(home)
    if shell_rc is None:
        print("\n⚠ Could not detect shell config file (.zshrc or .bashrc)", file=out)
        print("Please manually add the following to your shell config:\n", file=out)
        print(shell_function(), file=out)
        return 0

    try:
        existing = shell_rc.read_text(encoding="utf-8", errors="replace")
        if SHELL_FUNCTION_MARKER in existing:
            print(f"✓ Shell function already installed in {shell_rc}", file=out)
        else:
            with shell_rc.open("a", encoding="utf-8") as handle:
                handle.write(SHELL_FUNCTION_HEADER + shell_function())
            print(f"✓ Added shell function to {shell_rc}", file=out)
    except OSError as exc:
        logger.error("install failed updating %s: %s", shell_rc, exc)
        print(f"ils: cannot update {shell_rc}: {exc}", file=sys.stderr)
        return 1

    logger.info("installed shell function into %s", shell_rc)
    print("\n✨ Installation complete!", file=out)
    print(f"\nRun 'source {shell_rc}' or restart your shell to use 'ils'", file=out)
    return 0
