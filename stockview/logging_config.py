# stockview/logging_config.py
"""
Centralized logging configuration.
Importing this module configures logging from settings (LOG_LEVEL,
LOG_TO_FILE, LOG_DIR, ENV).
"""
import logging
import sys
from pathlib import Path
from datetime import datetime

from .config import settings

DEFAULT_LOGS_DIR = Path(__file__).resolve().parents[1] / "logs"

# Libraries whose INFO chatter drowns out our own per-request messages
QUIET_LOGGERS = ("httpx", "httpcore", "uvicorn.access")

ENV_LEVELS = {"dev": "DEBUG", "test": "WARNING"}


def default_level() -> str:
    """LOG_LEVEL when set, otherwise chosen by ENV (INFO outside dev/test)."""
    if settings.log_level:
        return settings.log_level.upper()
    return ENV_LEVELS.get(settings.env, "INFO")


def log_file_path(log_dir: Path | None = None, when: datetime | None = None) -> Path:
    """One file per environment and day, e.g. logs/stockview-prod-20261019.log."""
    directory = Path(log_dir or settings.log_dir or DEFAULT_LOGS_DIR)
    return directory / f"stockview-{settings.env}-{(when or datetime.now()):%Y%m%d}.log"


def setup_logging(
    level: str | None = None,
    log_to_file: bool | None = None,
    log_to_console: bool = True,
    log_dir: Path | None = None,
) -> None:
    """
    Configure application-wide logging.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR); default_level() when omitted
        log_to_file: Whether to write logs to file; LOG_TO_FILE when omitted
        log_to_console: Whether to output to stderr
        log_dir: Directory for the log file; LOG_DIR or ./logs when omitted
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, (level or default_level()).upper()))

    # Clear existing handlers
    root_logger.handlers.clear()

    formatter = logging.Formatter(
        fmt="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S"
    )

    if log_to_console:
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setFormatter(formatter)
        root_logger.addHandler(console_handler)

    if settings.log_to_file if log_to_file is None else log_to_file:
        log_file = log_file_path(log_dir)
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


# Auto-configure when module is imported
setup_logging()
