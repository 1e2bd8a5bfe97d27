"""Per-run diagnostic trace.

Every line goes to the module logger and is also kept in order so the
HTTP response can return the full trace of a run.
"""

from __future__ import annotations

import logging

logger = logging.getLogger("expiry_reminder.run")


class RunLog:
    """Collects human-readable log lines for one check run."""

    def __init__(self) -> None:
        self.lines: list[str] = []

    def info(self, msg: str) -> None:
        logger.info(msg)
        self.lines.append(msg)

    def warning(self, msg: str) -> None:
        logger.warning(msg)
        self.lines.append(msg)

    def error(self, msg: str) -> None:
        logger.error(msg)
        self.lines.append(msg)
