"""Command-line front door for ils.

Parses options, handles the one-shot commands (``--install``, ``--init``,
``--version``), then loads configuration and starts the browser in the
current directory.
"""

from __future__ import annotations

import argparse
import logging
import sys
from collections.abc import Sequence
from pathlib import Path

from . import __version__
from .config import CONFIG_DIR, load_app_config
from .directory_model import DirectoryModel
from .errors import DirectoryReadError, HandoffWriteError
from .handoff import HANDOFF_PATH, clear_stale_handoff, shell_function
from .installer import install
from .log import configure_logging

logger = logging.getLogger(__name__)

INIT_PREAMBLE = (
    "# Interactive ls (ils) - Add this to your ~/.zshrc or ~/.bashrc\n"
    "# NOTE: Replace 'ils-bin' with the actual path to the installed script if it's not in your PATH\n"
)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ils-bin",
        description="Browse directories in a square grid; select a directory to cd into it.",
    )
    parser.add_argument("--version", "-v", action="store_true", help="Print the version and exit.")
    parser.add_argument(
        "--install",
        action="store_true",
        help="Write default config files and add the ils shell function to ~/.zshrc or ~/.bashrc.",
    )
    parser.add_argument("--init", action="store_true", help="Print the ils shell function and exit.")
    return parser


def main(argv: Sequence[str] | None = None, start_dir: Path | None = None) -> None:
    """Parse CLI arguments and run the requested command.

    ``start_dir`` is primarily for tests; when omitted the current working
    directory is browsed.
    """
    args = build_parser().parse_args(argv)

    if args.version:
        print(f"ils {__version__}")
        return
    if args.init:
        sys.stdout.write(INIT_PREAMBLE + shell_function())
        return

    configure_logging()
    if args.install:
        status = install(config_dir=CONFIG_DIR)
        if status:
            raise SystemExit(status)
        return

    # Imported here so the one-shot commands never touch termios.
    from .app import run_browser

    clear_stale_handoff(HANDOFF_PATH)
    config = load_app_config(CONFIG_DIR)
    model = DirectoryModel()
    try:
        model.load(start_dir if start_dir is not None else Path.cwd())
    except DirectoryReadError as exc:
        logger.error("%s", exc)
        raise SystemExit(f"ils: {exc}") from exc

    try:
        status = run_browser(config, model)
    except HandoffWriteError as exc:
        logger.error("%s", exc)
        raise SystemExit(f"ils: {exc}") from exc
    if status:
        raise SystemExit(status)


if __name__ == "__main__":
    main()
