"""
Logging setup shared by the backend and the UI process.

Both processes use stdout as a protocol channel (MCP stdio and the fallback
answer), so log records go to a rotating file and, optionally, to stderr.
"""

import logging
import os
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler

from ask_human.runtime_config import LOG_LEVEL_ENV, LOG_STDERR_ENV, get_data_dir

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def get_log_file() -> Path:
    """Return the path of the ask-human log file."""
    return get_data_dir() / "logs" / "ask_human.log"


def setup_logging(log_file: Optional[Path] = None) -> None:
    """
    Configure the ask_human logger hierarchy.

    Level comes from ASK_HUMAN_LOG_LEVEL (default INFO). Set
    ASK_HUMAN_LOG_STDERR=1 to mirror records to stderr via Rich.
    """
    logger = logging.getLogger("ask_human")
    if logger.handlers:
        return

    level_name = os.environ.get(LOG_LEVEL_ENV, "INFO").upper()
    logger.setLevel(getattr(logging, level_name, logging.INFO))
    logger.propagate = False

    path = log_file or get_log_file()
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(
            path, maxBytes=1_000_000, backupCount=3, encoding="utf-8"
        )
        file_handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(file_handler)
    except OSError:
        # Read-only home: fall back to stderr only
        logger.addHandler(RichHandler(console=Console(stderr=True)))
        return

    if os.environ.get(LOG_STDERR_ENV) == "1":
        logger.addHandler(
            RichHandler(console=Console(stderr=True), show_path=False)
        )
