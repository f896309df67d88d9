"""Logging interface and implementations."""

import sys
from abc import ABC, abstractmethod
from enum import Enum
from typing import Any, Optional, TextIO


class LogLevel(str, Enum):
    """Log level enumeration."""

    DEBUG = "debug"
    INFO = "info"
    WARN = "warn"
    ERROR = "error"
    NONE = "none"


_SEVERITY = {
    LogLevel.DEBUG: 0,
    LogLevel.INFO: 1,
    LogLevel.WARN: 2,
    LogLevel.ERROR: 3,
    LogLevel.NONE: 4,
}


class Logger(ABC):
    """
    Logger used throughout the SDK.

    Messages use ``%`` placeholders, filled from ``args`` only when the
    message is actually emitted.
    """

    @abstractmethod
    def debug(self, message: str, *args: Any) -> None:
        pass

    @abstractmethod
    def info(self, message: str, *args: Any) -> None:
        pass

    @abstractmethod
    def warn(self, message: str, *args: Any) -> None:
        pass

    @abstractmethod
    def error(self, message: str, *args: Any) -> None:
        pass


class ConsoleLogger(Logger):
    """Writes log lines to a text stream (stdout unless told otherwise)."""

    def __init__(
        self,
        level: LogLevel = LogLevel.INFO,
        prefix: str = "[Korbit SDK]",
        stream: Optional[TextIO] = None,
    ):
        """
        Initialize console logger.

        Args:
            level: Minimum log level to display
            prefix: Prefix for log lines
            stream: Destination stream, defaults to the current ``sys.stdout``
        """
        self.level = level
        self.prefix = prefix
        self._stream = stream

    def _emit(self, level: LogLevel, message: str, args: tuple[Any, ...]) -> None:
        if _SEVERITY[level] < _SEVERITY[self.level] or self.level is LogLevel.NONE:
            return
        text = message % args if args else message
        stream = self._stream or sys.stdout
        print(f"{self.prefix} {level.value.upper()}: {text}", file=stream)

    def debug(self, message: str, *args: Any) -> None:
        self._emit(LogLevel.DEBUG, message, args)

    def info(self, message: str, *args: Any) -> None:
        self._emit(LogLevel.INFO, message, args)

    def warn(self, message: str, *args: Any) -> None:
        self._emit(LogLevel.WARN, message, args)

    def error(self, message: str, *args: Any) -> None:
        self._emit(LogLevel.ERROR, message, args)

    def set_level(self, level: LogLevel) -> None:
        self.level = level

    def get_level(self) -> LogLevel:
        return self.level


class NoopLogger(Logger):
    """Discards everything."""

    def debug(self, message: str, *args: Any) -> None:
        pass

    def info(self, message: str, *args: Any) -> None:
        pass

    def warn(self, message: str, *args: Any) -> None:
        pass

    def error(self, message: str, *args: Any) -> None:
        pass
