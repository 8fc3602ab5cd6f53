"""
Monitor.

Leveled, fire-and-forget logging sink used by the catalog engine. The
monitor mirrors the levels of a connector runtime monitor (debug, info,
warning, severe) on top of the standard `logging` module.
"""

import logging
from typing import Optional


LOG_FORMAT = "%(asctime)s %(levelname)-8s [%(name)s] %(message)s"


def configure_logging(level: str = "INFO") -> None:
    """
    Configures the root logger once at bootstrap.

    Args:
        level (str): Name of the root log level (e.g. "INFO", "DEBUG").
    """

    logging.basicConfig(level=getattr(logging, level.upper(), logging.INFO), format=LOG_FORMAT)


class Monitor:
    """
    Leveled text sink. Calls never raise and return nothing.

    Example:
        >>> monitor = Monitor("edc_catalog.sample")
        >>> monitor.info("Asset registered: weather-api-asset")
    """

    def __init__(self, name: str = "edc_catalog", logger: Optional[logging.Logger] = None):
        self._logger = logger or logging.getLogger(name)

    def debug(self, message: str, error: Optional[BaseException] = None) -> None:
        self._log(logging.DEBUG, message, error)

    def info(self, message: str, error: Optional[BaseException] = None) -> None:
        self._log(logging.INFO, message, error)

    def warning(self, message: str, error: Optional[BaseException] = None) -> None:
        self._log(logging.WARNING, message, error)

    def severe(self, message: str, error: Optional[BaseException] = None) -> None:
        self._log(logging.ERROR, message, error)

    def _log(self, level: int, message: str, error: Optional[BaseException]) -> None:
        # exc_info only for errors that carry a traceback
        exc_info = error if error is not None and error.__traceback__ is not None else None
        self._logger.log(level, message, exc_info=exc_info)
