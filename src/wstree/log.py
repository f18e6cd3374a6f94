"""Logger capability passed into wstree components (no global logger)."""

from __future__ import annotations

import logging
from typing import Any, Protocol

# Between DEBUG (10) and INFO (20): per-package and per-edge diagnostics.
VERBOSE = 15
logging.addLevelName(VERBOSE, "VERBOSE")


class Logger(Protocol):
    """Anything with these five methods can receive wstree diagnostics."""

    def info(self, message: str, *args: Any) -> None: ...

    def warn(self, message: str, *args: Any) -> None: ...

    def error(self, message: str, *args: Any) -> None: ...

    def verbose(self, message: str, *args: Any) -> None: ...

    def debug(self, message: str, *args: Any) -> None: ...


class NullLogger:
    """Drops everything. Used when no logger is configured."""

    def info(self, message: str, *args: Any) -> None:
        pass

    def warn(self, message: str, *args: Any) -> None:
        pass

    def error(self, message: str, *args: Any) -> None:
        pass

    def verbose(self, message: str, *args: Any) -> None:
        pass

    def debug(self, message: str, *args: Any) -> None:
        pass


class StdlibLogger:
    """Forward wstree diagnostics to a standard library ``logging.Logger``."""

    def __init__(self, logger: logging.Logger | None = None) -> None:
        self._logger = logger if logger is not None else logging.getLogger("wstree")

    @property
    def logger(self) -> logging.Logger:
        return self._logger

    def info(self, message: str, *args: Any) -> None:
        self._logger.info(message, *args)

    def warn(self, message: str, *args: Any) -> None:
        self._logger.warning(message, *args)

    def error(self, message: str, *args: Any) -> None:
        self._logger.error(message, *args)

    def verbose(self, message: str, *args: Any) -> None:
        self._logger.log(VERBOSE, message, *args)

    def debug(self, message: str, *args: Any) -> None:
        self._logger.debug(message, *args)


_NULL_LOGGER = NullLogger()


def resolve_logger(logger: Logger | None) -> Logger:
    """Return the given logger, or a silent one if None."""
    return logger if logger is not None else _NULL_LOGGER
