"""
Logging setup for the tally bot.

``setup_logging()`` installs, on the root logger:

- ``tallybot.log``: everything at ``LOG_LEVEL`` and above
- ``errors.log``: errors only, with the source location of each record
- ``debug.log``: everything
- a coloured console stream at ``LOG_LEVEL``
"""

import logging
import logging.handlers
import pathlib
import sys
from typing import NamedTuple, Optional

from tallybot.config import settings

_logging_initialized = False

MB = 1024 * 1024

LINE_FORMAT = "[%(asctime)s] %(levelname)-8s [%(short_name)s] %(message)s"
ERROR_FORMAT = (
    "[%(asctime)s] %(levelname)-8s [%(name)s:%(lineno)d] %(message)s\n"
    "    File: %(pathname)s"
)

# ANSI escape per level name
COLORS = {
    "DEBUG": "\033[36m",
    "INFO": "\033[32m",
    "WARNING": "\033[33m",
    "ERROR": "\033[31m",
    "CRITICAL": "\033[35m",
    "RESET": "\033[0m",
}

# Third-party loggers and the most they may say
QUIET_LOGGERS = {
    "discord": logging.INFO,
    "discord.gateway": logging.WARNING,
    "discord.http": logging.WARNING,
    "apscheduler": logging.WARNING,
    "asyncio": logging.WARNING,
}


class LogFile(NamedTuple):
    filename: str
    level: Optional[int]  # None means LOG_LEVEL
    fmt: str
    max_bytes: int
    backup_count: int


LOG_FILES = (
    LogFile("tallybot.log", None, LINE_FORMAT, 10 * MB, 5),
    LogFile("errors.log", logging.ERROR, ERROR_FORMAT, 5 * MB, 10),
    LogFile("debug.log", logging.DEBUG, LINE_FORMAT, 20 * MB, 3),
)


class ColoredFormatter(logging.Formatter):
    """Paints the level name; the record itself is left untouched."""

    def format(self, record: logging.LogRecord) -> str:
        original = record.levelname
        color = COLORS.get(original)
        if color:
            record.levelname = f"{color}{original}{COLORS['RESET']}"
        try:
            return super().format(record)
        finally:
            record.levelname = original


class ContextFilter(logging.Filter):
    """Sets ``record.short_name``: ``tallybot.services.backfill`` logs as ``backfill``."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.short_name = record.name.rsplit(".", 1)[-1] if record.name else "root"
        return True


def _rotating_handler(directory: pathlib.Path, spec: LogFile, default_level: int,
                      context_filter: logging.Filter) -> logging.Handler:
    handler = logging.handlers.RotatingFileHandler(
        directory / spec.filename,
        maxBytes=spec.max_bytes,
        backupCount=spec.backup_count,
        encoding="utf-8",
    )
    handler.setLevel(default_level if spec.level is None else spec.level)
    handler.setFormatter(logging.Formatter(spec.fmt, datefmt="%Y-%m-%d %H:%M:%S"))
    handler.addFilter(context_filter)
    return handler


def setup_logging(log_dir: str | None = None) -> None:
    """Configure the root logger. Later calls in the same process do nothing."""
    global _logging_initialized

    if _logging_initialized:
        return
    _logging_initialized = True

    directory = pathlib.Path(log_dir or settings.log_dir)
    directory.mkdir(parents=True, exist_ok=True)
    level = getattr(logging, settings.log_level, logging.INFO)
    context_filter = ContextFilter()

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.setLevel(logging.DEBUG)

    for spec in LOG_FILES:
        root_logger.addHandler(_rotating_handler(directory, spec, level, context_filter))

    console = logging.StreamHandler(sys.stdout)
    console.setLevel(level)
    console.setFormatter(ColoredFormatter(LINE_FORMAT, datefmt="%H:%M:%S"))
    console.addFilter(context_filter)
    root_logger.addHandler(console)

    for name, quiet_level in QUIET_LOGGERS.items():
        logging.getLogger(name).setLevel(quiet_level)

    logging.info(f"Logging: level={settings.log_level} | dir={directory.absolute()}")
    logging.info("  " + ", ".join(spec.filename for spec in LOG_FILES))
