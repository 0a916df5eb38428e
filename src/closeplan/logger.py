"""Logging configuration for closeplan with custom verbosity levels."""

from __future__ import annotations

import logging
import sys
from typing import TYPE_CHECKING, Any, TextIO

if TYPE_CHECKING:
    from datetime import date

# Custom levels between the standard ones
CHANGES_LEVEL = 25  # Between INFO (20) and WARNING (30) - verbosity 1
CHECKS_LEVEL = 15  # Between DEBUG (10) and INFO (20) - verbosity 2

logging.addLevelName(CHANGES_LEVEL, "CHANGES")
logging.addLevelName(CHECKS_LEVEL, "CHECKS")

VERBOSITY_SILENT = 0  # Only errors
VERBOSITY_CHANGES = 1  # Cycles created, executions rescheduled
VERBOSITY_CHECKS = 2  # Per-task date computation
VERBOSITY_DEBUG = 3  # Full debug output

_LEVEL_MAP = {
    VERBOSITY_SILENT: logging.ERROR,
    VERBOSITY_CHANGES: CHANGES_LEVEL,
    VERBOSITY_CHECKS: CHECKS_LEVEL,
    VERBOSITY_DEBUG: logging.DEBUG,
}


class CloseplanLogger(logging.Logger):
    """Logger with semantic verbosity methods.

    - changes(): verbosity 1 - records that were created or rescheduled
    - rescheduled(): verbosity 1 - an execution's old and new date window
    - checks(): verbosity 2 - how each task's dates were derived
    - debug(): verbosity 3 - graph traversal details
    """

    def changes(self, msg: str, *args: Any, **kwargs: Any) -> None:
        """Log changes (verbosity level 1)."""
        if self.isEnabledFor(CHANGES_LEVEL):
            self._log(CHANGES_LEVEL, msg, args, **kwargs)

    def checks(self, msg: str, *args: Any, **kwargs: Any) -> None:
        """Log checks (verbosity level 2)."""
        if self.isEnabledFor(CHECKS_LEVEL):
            self._log(CHECKS_LEVEL, msg, args, **kwargs)

    def rescheduled(
        self, definition_id: str, old: tuple[date, date], new: tuple[date, date]
    ) -> None:
        """Log an execution whose (start, end) window moved (verbosity level 1).

        Unchanged windows are not logged.
        """
        if old != new and self.isEnabledFor(CHANGES_LEVEL):
            self._log(CHANGES_LEVEL, "%s: %s..%s -> %s..%s", (definition_id, *old, *new))


def get_logger() -> CloseplanLogger:
    """Get the closeplan logger instance (singleton).

    Use setup_logger() to configure it before first use.
    """
    logging.setLoggerClass(CloseplanLogger)
    logger = logging.getLogger("closeplan")
    assert isinstance(logger, CloseplanLogger)
    return logger


def setup_logger(verbosity: int, stream: TextIO | None = None) -> None:
    """Configure the closeplan logger with a verbosity level.

    Can be called multiple times to reconfigure the logger.

    Args:
        verbosity: 0=silent (errors only), 1=changes, 2=checks, 3=debug
        stream: Optional output stream (defaults to sys.stderr)
    """
    logger = get_logger()
    logger.handlers.clear()
    logger.setLevel(_LEVEL_MAP.get(verbosity, logging.ERROR))

    handler = logging.StreamHandler(stream if stream is not None else sys.stderr)
    handler.setFormatter(logging.Formatter("%(message)s"))
    logger.addHandler(handler)
    logger.propagate = False


def reset_logger() -> None:
    """Reset the logger to a clean, silent state."""
    logger = get_logger()
    logger.handlers.clear()
    logger.setLevel(logging.ERROR)

