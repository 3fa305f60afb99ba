# src/config/logging_config.py

"""Per-run logging for the price_watch client.

Every launch writes ``logs/run_<timestamp>.log`` (DEBUG and up, with the
module, function and line of each record) and mirrors WARNING and up to
stderr.  All ``price_watch.*`` loggers propagate into this pair of
handlers, so the orchestrator, the remote clients and the UI share one
log per run.
"""

import logging
import sys
from datetime import datetime
from pathlib import Path

from src.config.settings import Settings

ROOT_LOGGER_NAME = "price_watch"

_FILE_FORMAT = (
    "%(asctime)s | %(levelname)-8s | %(name)s | "
    "%(module)s:%(funcName)s:%(lineno)d | %(message)s"
)
_CONSOLE_FORMAT = "%(asctime)s | %(levelname)-8s | %(message)s"
_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def _log_path(logs_dir: Path) -> Path:
    """Build the timestamped log file path for this run."""
    stamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    return logs_dir / f"run_{stamp}.log"


def setup_logging(console_level: int = logging.WARNING) -> Path:
    """Attach the file and console handlers to the project logger.

    Safe to call more than once: handlers are only added the first time.

    Returns:
        The :class:`~pathlib.Path` of the log file for this run.
    """
    logs_dir: Path = Settings.LOGS_DIR
    logs_dir.mkdir(parents=True, exist_ok=True)
    log_file = _log_path(logs_dir)

    project_logger = logging.getLogger(ROOT_LOGGER_NAME)
    project_logger.setLevel(logging.DEBUG)

    if project_logger.handlers:
        return log_file

    file_handler = logging.FileHandler(log_file, encoding="utf-8")
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(
        logging.Formatter(_FILE_FORMAT, datefmt=_DATE_FORMAT)
    )

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(console_level)
    console_handler.setFormatter(
        logging.Formatter(_CONSOLE_FORMAT, datefmt=_DATE_FORMAT)
    )

    project_logger.addHandler(file_handler)
    project_logger.addHandler(console_handler)
    project_logger.info("Logging initialised, writing to %s", log_file)

    return log_file
