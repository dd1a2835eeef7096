"""Logging helpers: one-time root configuration and the injectable job logger."""
from __future__ import annotations

import logging
from typing import Any, Protocol

LOG_FORMAT = "%(asctime)s %(levelname)-8s [%(name)s] %(message)s"
LOG_DATEFMT = "%Y-%m-%d %H:%M:%S"


class ConverterLogger(Protocol):
    """What the converter components need from a logger."""

    def debug(self, msg: str, *args: Any) -> None: ...

    def info(self, msg: str, *args: Any) -> None: ...

    def fatal(self, exc: BaseException, msg: str = "", *args: Any) -> None: ...


class StdConverterLogger:
    """ConverterLogger backed by the standard ``logging`` module."""

    def __init__(self, logger: logging.Logger) -> None:
        self._logger = logger

    @property
    def name(self) -> str:
        return self._logger.name

    def debug(self, msg: str, *args: Any) -> None:
        self._logger.debug(msg, *args)

    def info(self, msg: str, *args: Any) -> None:
        self._logger.info(msg, *args)

    def fatal(self, exc: BaseException, msg: str = "", *args: Any) -> None:
        # CRITICAL with the traceback of the failed job, not of the caller
        if msg:
            self._logger.critical(msg + ": %s", *args, exc, exc_info=exc)
        else:
            self._logger.critical("%s: %s", type(exc).__name__, exc, exc_info=exc)


def get_logger(name: str) -> StdConverterLogger:
    """Return the default injectable logger for a component."""
    return StdConverterLogger(logging.getLogger(name))


def configure_logging(level: str | int = "DEBUG") -> None:
    """Install the root handler once and set the level.

    Unknown level names fall back to DEBUG.
    """
    if isinstance(level, str):
        resolved = logging.getLevelName(level.strip().upper())
        level = resolved if isinstance(resolved, int) else logging.DEBUG

    root = logging.getLogger()
    if not root.handlers:
        logging.basicConfig(format=LOG_FORMAT, datefmt=LOG_DATEFMT)
    root.setLevel(level)
