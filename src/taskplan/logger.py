"""The ``taskplan`` logger.

Two levels are added to the standard ones: ``changes`` (25) reports schedule
mutations such as saves and added or removed tasks, and ``checks`` (15)
reports the placement decision for each task. The CLI ``-v`` count selects
the threshold.
"""

from __future__ import annotations

import logging
import sys
from typing import Any, TextIO

LOGGER_NAME = "taskplan"

CHANGES_LEVEL = 25
CHECKS_LEVEL = 15

logging.addLevelName(CHANGES_LEVEL, "CHANGES")
logging.addLevelName(CHECKS_LEVEL, "CHECKS")

# Indexed by the -v count
_VERBOSITY_LEVELS = (logging.WARNING, CHANGES_LEVEL, CHECKS_LEVEL, logging.DEBUG)


class TaskplanLogger(logging.Logger):
    def changes(self, msg: str, *args: Any, **kwargs: Any) -> None:
        if self.isEnabledFor(CHANGES_LEVEL):
            self._log(CHANGES_LEVEL, msg, args, **kwargs)

    def checks(self, msg: str, *args: Any, **kwargs: Any) -> None:
        if self.isEnabledFor(CHECKS_LEVEL):
            self._log(CHECKS_LEVEL, msg, args, **kwargs)


class _VerbosityFormatter(logging.Formatter):
    """Plain messages, with a level prefix for warnings and errors."""

    def format(self, record: logging.LogRecord) -> str:
        message = super().format(record)
        if record.levelno >= logging.WARNING:
            return f"{record.levelname}: {message}"
        return message


def get_logger() -> TaskplanLogger:
    logging.setLoggerClass(TaskplanLogger)
    logger = logging.getLogger(LOGGER_NAME)
    assert isinstance(logger, TaskplanLogger)
    return logger


def setup_logger(verbosity: int, stream: TextIO | None = None) -> None:
    """Send taskplan log output to ``stream`` (stderr by default).

    Args:
        verbosity: 0=warnings, 1=changes, 2=checks, 3=debug; larger values count as 3
    """
    logger = get_logger()
    logger.handlers.clear()
    logger.setLevel(_VERBOSITY_LEVELS[max(0, min(verbosity, len(_VERBOSITY_LEVELS) - 1))])

    handler = logging.StreamHandler(stream if stream is not None else sys.stderr)
    handler.setFormatter(_VerbosityFormatter())
    logger.addHandler(handler)
    logger.propagate = False


def reset_logger() -> None:
    """Drop handlers and return to the default WARNING threshold."""
    logger = get_logger()
    logger.handlers.clear()
    logger.setLevel(logging.WARNING)
    logger.propagate = True


def checks_enabled() -> bool:
    return get_logger().isEnabledFor(CHECKS_LEVEL)


def debug_enabled() -> bool:
    return get_logger().isEnabledFor(logging.DEBUG)
