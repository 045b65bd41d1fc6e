"""Logging setup for the grader and its console commands."""

import logging
import sys
from pathlib import Path

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"

# Client libraries log every request at INFO
CHATTY_LOGGERS = ("httpx", "httpcore", "anthropic")


def setup_logging(level: int = logging.INFO, log_file: Path | None = None) -> None:
    """Send log records to stderr and, optionally, a file.

    Console output of the CLI goes to stdout, so logs never interleave
    with tables and exports.

    Args:
        level: Root logging level
        log_file: Extra UTF-8 log file, created with its parent directory
    """
    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_file, encoding="utf-8"))

    logging.basicConfig(level=level, format=LOG_FORMAT, handlers=handlers, force=True)

    quiet = logging.DEBUG if level <= logging.DEBUG else logging.WARNING
    for name in CHATTY_LOGGERS:
        logging.getLogger(name).setLevel(quiet)


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)
