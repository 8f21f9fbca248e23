"""Logging configuration for the rent ledger API and scheduler.

Provides dual output (stdout + file) with configurable level via LOG_LEVEL env var.
Default: INFO. Set LOG_LEVEL=WARNING for production, DEBUG for verbose output.
Generation runs and payment intake are audited through these logs.
"""

import logging
import os
import sys
from pathlib import Path

LOG_FORMAT = "[%(asctime)s] %(name)s - %(levelname)s - %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Map string level names to logging constants
LOG_LEVEL_MAP = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}

# Libraries that are noisy at INFO
QUIET_LOGGERS = ("apscheduler", "sqlalchemy.engine", "httpx")


def get_log_level() -> int:
    """Get logging level from LOG_LEVEL environment variable.

    Returns:
        Logging level constant (default: INFO)
    """
    level_str = os.getenv("LOG_LEVEL", "INFO").upper()
    return LOG_LEVEL_MAP.get(level_str, logging.INFO)


def setup_server_logging(log_file: str = "logs/server.log") -> None:
    """
    Configure root logger for the API server and scheduled jobs.

    Args:
        log_file: Path to log file (default: logs/server.log)

    Behavior:
        - Sets up all loggers to output to both stdout and file
        - ISO format timestamps for consistency
        - Third-party loggers in QUIET_LOGGERS are capped at WARNING
    """
    log_path = Path(log_file)
    log_path.parent.mkdir(parents=True, exist_ok=True)

    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt=LOG_DATE_FORMAT)
    log_level = get_log_level()

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)

    # Remove any existing handlers to avoid duplicates
    root_logger.handlers.clear()

    stdout_handler = logging.StreamHandler(sys.stdout)
    stdout_handler.setLevel(log_level)
    stdout_handler.setFormatter(formatter)
    root_logger.addHandler(stdout_handler)

    file_handler = logging.FileHandler(log_path)
    file_handler.setLevel(log_level)
    file_handler.setFormatter(formatter)
    root_logger.addHandler(file_handler)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(log_level, logging.WARNING))
