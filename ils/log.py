"""Logging setup for the browser process.

The TUI owns the terminal, so records go to a rotating file under the
platform log directory instead of the console.
"""

from __future__ import annotations

import logging
import logging.handlers
import os
import sys
from collections.abc import Mapping
from pathlib import Path

from platformdirs import user_log_dir

LOG_DIR = Path(user_log_dir("ils", appauthor=False))
LOG_FILENAME = "ils.log"
LOG_LEVEL_ENV = "ILS_LOG_LEVEL"
LOG_MAX_BYTES = 1024 * 1024
LOG_BACKUP_COUNT = 3


def configure_logging(
    log_dir: Path = LOG_DIR,
    environ: Mapping[str, str] | None = None,
) -> logging.Handler | None:
    """Attach a rotating file handler to the root logger and return it.

    Never raises: when the log file cannot be opened the problem is printed
    to stderr and the process continues without file logging.
    """
    environ = os.environ if environ is None else environ
    level_name = environ.get(LOG_LEVEL_ENV, "INFO").upper()
    level = getattr(logging, level_name, None)
    if not isinstance(level, int):
        level = logging.INFO

    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    log_path = log_dir / LOG_FILENAME
    try:
        log_dir.mkdir(parents=True, exist_ok=True)
        handler = logging.handlers.RotatingFileHandler(
            log_path, maxBytes=LOG_MAX_BYTES, backupCount=LOG_BACKUP_COUNT, encoding="utf-8"
        )
    except OSError as exc:
        print(f"ils: cannot open log file {log_path}: {exc}", file=sys.stderr)
        return None

    handler.setFormatter(
        logging.Formatter("%(asctime)s - %(levelname)-8s - %(name)-18s - %(message)s")
    )
    handler.setLevel(level)
    root_logger.addHandler(handler)
    return handler
