"""
Logger Utility
==============

Context-aware, colour-coded logging used by every component.

Each module creates its own logger with a component name so that a turn
can be followed through the output:

    [2026-01-31T10:30:00] [INFO] [Agent] Turn started (3 messages in memory)
    [2026-01-31T10:30:01] [DEBUG] [Provider:openai] Sending 3 messages

Levels are filtered by the LOG_LEVEL environment variable (default INFO).
Errors and warnings go to stderr, everything else to stdout.

Usage:
    from aigent.utils.logger import Logger

    logger = Logger("Agent")
    logger.info("Agent ready", {"model": "gpt-4o"})

    provider_logger = logger.child("openai")   # [Agent:openai]
"""

import json
import os
import sys
from datetime import datetime
from enum import IntEnum
from typing import Any


class LogLevel(IntEnum):
    """Numeric levels; higher means more severe."""
    DEBUG = 10
    INFO = 20
    WARNING = 30
    ERROR = 40


class Colors:
    """ANSI escape codes for terminal output."""
    RESET = "\033[0m"
    DEBUG = "\033[36m"
    INFO = "\033[32m"
    WARNING = "\033[33m"
    ERROR = "\033[31m"
    DIM = "\033[2m"


_LEVEL_NAMES = {
    "DEBUG": LogLevel.DEBUG,
    "INFO": LogLevel.INFO,
    "WARNING": LogLevel.WARNING,
    "WARN": LogLevel.WARNING,
    "ERROR": LogLevel.ERROR,
}


def parse_level(value: str | None) -> LogLevel:
    """
    Map a level name to a LogLevel.

    Unknown or missing names fall back to INFO.
    """
    if not value:
        return LogLevel.INFO
    return _LEVEL_NAMES.get(value.strip().upper(), LogLevel.INFO)


class Logger:
    """
    A logger bound to a component name.

    The minimum level is read from LOG_LEVEL when the logger is created;
    set_level() overrides it afterwards (useful in tests).
    """

    def __init__(self, context: str = ""):
        self.context = context
        self._min_level = parse_level(os.getenv("LOG_LEVEL"))

    def child(self, child_context: str) -> "Logger":
        """Return a logger whose context is nested under this one."""
        context = f"{self.context}:{child_context}" if self.context else child_context
        child = Logger(context)
        child._min_level = self._min_level
        return child

    def set_level(self, level: LogLevel | str) -> None:
        self._min_level = parse_level(level) if isinstance(level, str) else level

    def is_enabled_for(self, level: LogLevel) -> bool:
        return level >= self._min_level

    def _emit(
        self,
        level: LogLevel,
        color: str,
        message: str,
        data: dict[str, Any] | None = None
    ) -> None:
        if not self.is_enabled_for(level):
            return

        timestamp = datetime.now().isoformat(timespec="seconds")
        context = f"[{self.context}] " if self.context else ""
        line = (
            f"{Colors.DIM}[{timestamp}]{Colors.RESET} "
            f"{color}[{level.name}]{Colors.RESET} "
            f"{context}{message}"
        )

        stream = sys.stderr if level >= LogLevel.WARNING else sys.stdout
        print(line, file=stream)
        if data:
            payload = json.dumps(data, indent=2, default=str)
            print(f"{Colors.DIM}{payload}{Colors.RESET}", file=stream)

    def debug(self, message: str, data: dict[str, Any] | None = None) -> None:
        self._emit(LogLevel.DEBUG, Colors.DEBUG, message, data)

    def info(self, message: str, data: dict[str, Any] | None = None) -> None:
        self._emit(LogLevel.INFO, Colors.INFO, message, data)

    def warning(self, message: str, data: dict[str, Any] | None = None) -> None:
        self._emit(LogLevel.WARNING, Colors.WARNING, message, data)

    def error(self, message: str, error: BaseException | None = None) -> None:
        """
        Log an error, optionally with the exception that caused it.

        Args:
            message: What went wrong
            error: The exception; its type, message and (for agent errors)
                code are attached as structured data
        """
        data = None
        if error is not None:
            data = {
                "error_type": type(error).__name__,
                "error_message": str(error),
            }
            code = getattr(error, "code", None)
            if code:
                data["error_code"] = code
        self._emit(LogLevel.ERROR, Colors.ERROR, message, data)


logger = Logger("AIGent")
