"""
Logger interface for diagnostic output.

Publish progress and failures are reported through ILogger, attributed
to the target they concern via bind(). User-facing summaries are
printed by the CLI commands.
"""

from abc import ABC, abstractmethod
from typing import Any


class ILogger(ABC):
    """Interface for internal logging."""

    @abstractmethod
    def debug(self, message: str, *args: Any, **kwargs: Any) -> None:
        """Log a debug-level message."""
        pass

    @abstractmethod
    def info(self, message: str, *args: Any, **kwargs: Any) -> None:
        """Log an info-level message."""
        pass

    @abstractmethod
    def warning(self, message: str, *args: Any, **kwargs: Any) -> None:
        """Log a warning-level message."""
        pass

    @abstractmethod
    def error(self, message: str, *args: Any, **kwargs: Any) -> None:
        """Log an error-level message."""
        pass

    @abstractmethod
    def set_level(self, level: str) -> None:
        """
        Set the logging level.

        Args:
            level: One of 'debug', 'info', 'warning', 'error'
        """
        pass

    def bind(self, target: str) -> "ILogger":
        """Return a logger whose records are attributed to ``target``."""
        return self
