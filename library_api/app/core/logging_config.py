"""
Logging setup for the library service.

Handlers are attached to the ``library_api`` package logger rather than
the root logger, so records from the services, the request middleware
and the client share one format while third-party loggers keep their
own configuration.
"""

import logging
from pathlib import Path

from .config import Settings

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
PACKAGE_LOGGER = "library_api"
# main.py writes its own access line for every request.
QUIET_LOGGERS = ("uvicorn.access",)


def _named(handler: logging.Handler) -> logging.Handler:
    handler.set_name(PACKAGE_LOGGER)
    handler.setFormatter(logging.Formatter(LOG_FORMAT, DATE_FORMAT))
    return handler


def setup_logging(config: Settings) -> logging.Logger:
    """Attach console (and optional file) handlers to the package logger.

    Safe to call once per ``create_app``: the level follows the latest
    settings, handlers are added only the first time.
    """
    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.setLevel(getattr(logging, config.log_level.upper(), logging.INFO))
    if any(handler.get_name() == PACKAGE_LOGGER for handler in logger.handlers):
        return logger

    logger.addHandler(_named(logging.StreamHandler()))
    if config.log_file:
        logger.addHandler(_named(logging.FileHandler(Path(config.log_file).resolve(), encoding="utf-8")))
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
    return logger
