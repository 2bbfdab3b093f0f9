"""Per-run review log.

Each review run owns its own ReviewLog so that two runs never share hidden
state. Entries are also forwarded to the standard ``logging`` tree of the
module that recorded them.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field


@dataclass
class LogEntry:
    level: int
    message: str


@dataclass
class ReviewLog:
    entries: list[LogEntry] = field(default_factory=list)

    def record(self, level: int, message: str, logger: logging.Logger | None = None) -> None:
        self.entries.append(LogEntry(level=level, message=message))
        if logger is not None:
            logger.log(level, message)

    def info(self, message: str, logger: logging.Logger | None = None) -> None:
        self.record(logging.INFO, message, logger)

    def warning(self, message: str, logger: logging.Logger | None = None) -> None:
        self.record(logging.WARNING, message, logger)

    @property
    def warnings(self) -> list[str]:
        return [e.message for e in self.entries if e.level >= logging.WARNING]

    def messages(self) -> list[str]:
        return [e.message for e in self.entries]
