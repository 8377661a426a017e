"""
Logging setup shared by the analysis modules, the CLI and the web UI.

Console output goes to stdout so the per-ballot-box issue listing can be
piped alongside the run summary. An optional log file receives the same
records.

Usage:
    from logging_config import setup_logging, get_logger, LogContext

    setup_logging(level="INFO", log_file="logs/audit.log")
    logger = get_logger(__name__)

    with LogContext(logger, "Checking ballot boxes", unit="ballot boxes") as stage:
        stage.count = len(records)
"""

import logging
import os
import sys
import time
from pathlib import Path
from typing import Iterable, Optional


LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Libraries whose INFO chatter drowns out the issue listing
NOISY_LOGGERS = ("urllib3", "requests", "httpx", "gradio", "tenacity")

# Separator printed above each ballot box's issues
ISSUE_SEPARATOR = "*" * 47


def setup_logging(level: Optional[str] = None, log_file: Optional[str] = None) -> None:
    """
    Configure the root logger.

    Args:
        level: Log level name. Defaults to env var LOG_LEVEL or INFO.
        log_file: Also write records to this file (parent directories are created)
    """
    if level is None:
        level = os.environ.get("LOG_LEVEL", "INFO")
    level = getattr(logging, level.upper(), logging.INFO)

    formatter = logging.Formatter(LOG_FORMAT, DATE_FORMAT)
    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_file, encoding="utf-8"))

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers = []
    for handler in handlers:
        handler.setLevel(level)
        handler.setFormatter(formatter)
        root_logger.addHandler(handler)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)


def log_ballot_issues(logger: logging.Logger, ballot_box_id: str, settlement: str, issues: Iterable[str]) -> None:
    """Log one ballot box's issues as a separated block (nothing when there are none)."""
    issues = list(issues)
    if not issues:
        return
    logger.info(ISSUE_SEPARATOR)
    logger.info(f"Issues in ballot {ballot_box_id} ({settlement})")
    for issue in issues:
        logger.info(issue)


class LogContext:
    """
    Context manager timing one analysis stage.

    Set `count` inside the block to report how many items the stage handled.
    Failures are logged at ERROR and re-raised.
    """

    def __init__(self, logger: logging.Logger, operation: str, unit: str = "items"):
        self.logger = logger
        self.operation = operation
        self.unit = unit
        self.count: Optional[int] = None
        self.start_time: Optional[float] = None

    def __enter__(self):
        self.start_time = time.perf_counter()
        self.logger.debug(f"Starting: {self.operation}")
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        elapsed = time.perf_counter() - self.start_time
        if exc_type is not None:
            self.logger.error(f"Failed: {self.operation} ({elapsed:.2f}s) - {exc_val}")
        elif self.count is None:
            self.logger.debug(f"Completed: {self.operation} ({elapsed:.2f}s)")
        else:
            self.logger.debug(f"Completed: {self.operation} ({self.count:,} {self.unit} in {elapsed:.2f}s)")
        return False


# Initialize logging on import if not already configured
if not logging.getLogger().handlers:
    setup_logging()
