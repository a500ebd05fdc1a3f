"""
Logging for publish runs.

Targets and their uploads run on worker threads, so lines from different
targets interleave. Every record therefore carries the label of the
target it concerns; the file log also names the worker thread.
"""

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any

from ..core.interfaces.logger import ILogger

RUN_LABEL = "-"

CONSOLE_FORMAT = "blobpub %(levelname)s [%(target)s] %(message)s"
FILE_FORMAT = "%(asctime)s %(levelname)-7s %(threadName)s [%(target)s] %(message)s"


def parse_level(level: str) -> int:
    """Map a configured level name to a logging level, defaulting to WARNING."""
    value = logging.getLevelName(level.upper())
    return value if isinstance(value, int) else logging.WARNING


class BlobpubLogger(ILogger):
    """
    stdlib-backed logger for publish runs.

    Output goes to stderr and/or a rotating ~/.blobpub/blobpub.log; with
    neither enabled every record is dropped. Use bind() to attribute
    records to a target.
    """

    LOG_FILE_PATH = Path.home() / ".blobpub" / "blobpub.log"
    MAX_FILE_SIZE = 5 * 1024 * 1024
    BACKUP_COUNT = 2

    def __init__(
        self,
        name: str = "blobpub",
        level: str = "warning",
        console_enabled: bool = False,
        file_enabled: bool = False,
    ) -> None:
        self._logger = logging.getLogger(name)
        self._logger.setLevel(logging.DEBUG)
        self._logger.handlers.clear()
        self._logger.propagate = False

        self._handlers: list[logging.Handler] = []
        if console_enabled:
            self._add(logging.StreamHandler(sys.stderr), CONSOLE_FORMAT)
        if file_enabled:
            self.LOG_FILE_PATH.parent.mkdir(parents=True, exist_ok=True)
            self._add(
                RotatingFileHandler(
                    self.LOG_FILE_PATH,
                    maxBytes=self.MAX_FILE_SIZE,
                    backupCount=self.BACKUP_COUNT,
                ),
                FILE_FORMAT,
            )
        self.set_level(level)

    def _add(self, handler: logging.Handler, fmt: str) -> None:
        handler.setFormatter(logging.Formatter(fmt, datefmt="%Y-%m-%dT%H:%M:%S"))
        self._logger.addHandler(handler)
        self._handlers.append(handler)

    def log(self, level: int, target: str, message: str, *args: Any, **kwargs: Any) -> None:
        """Emit one record attributed to ``target``."""
        extra = dict(kwargs.pop("extra", None) or {})
        extra["target"] = target
        self._logger.log(level, message, *args, extra=extra, **kwargs)

    def debug(self, message: str, *args: Any, **kwargs: Any) -> None:
        self.log(logging.DEBUG, RUN_LABEL, message, *args, **kwargs)

    def info(self, message: str, *args: Any, **kwargs: Any) -> None:
        self.log(logging.INFO, RUN_LABEL, message, *args, **kwargs)

    def warning(self, message: str, *args: Any, **kwargs: Any) -> None:
        self.log(logging.WARNING, RUN_LABEL, message, *args, **kwargs)

    def error(self, message: str, *args: Any, **kwargs: Any) -> None:
        self.log(logging.ERROR, RUN_LABEL, message, *args, **kwargs)

    def set_level(self, level: str) -> None:
        for handler in self._handlers:
            handler.setLevel(parse_level(level))

    def bind(self, target: str) -> ILogger:
        return TargetLogger(self, target)


class TargetLogger(ILogger):
    """A BlobpubLogger view that attributes every record to one target."""

    def __init__(self, parent: BlobpubLogger, target: str) -> None:
        self.parent = parent
        self.target = target

    def debug(self, message: str, *args: Any, **kwargs: Any) -> None:
        self.parent.log(logging.DEBUG, self.target, message, *args, **kwargs)

    def info(self, message: str, *args: Any, **kwargs: Any) -> None:
        self.parent.log(logging.INFO, self.target, message, *args, **kwargs)

    def warning(self, message: str, *args: Any, **kwargs: Any) -> None:
        self.parent.log(logging.WARNING, self.target, message, *args, **kwargs)

    def error(self, message: str, *args: Any, **kwargs: Any) -> None:
        self.parent.log(logging.ERROR, self.target, message, *args, **kwargs)

    def set_level(self, level: str) -> None:
        self.parent.set_level(level)

    def bind(self, target: str) -> ILogger:
        return self.parent.bind(target)


class NullLogger(ILogger):
    """Discards everything; used when the container has no logger."""

    def debug(self, message: str, *args: Any, **kwargs: Any) -> None:
        pass

    def info(self, message: str, *args: Any, **kwargs: Any) -> None:
        pass

    def warning(self, message: str, *args: Any, **kwargs: Any) -> None:
        pass

    def error(self, message: str, *args: Any, **kwargs: Any) -> None:
        pass

    def set_level(self, level: str) -> None:
        pass
