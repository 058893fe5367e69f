"""Logging configuration for the blockpress package logger."""

from __future__ import annotations

import logging
from logging.handlers import RotatingFileHandler

from .settings import Settings, settings as default_settings

LOGGER_NAME = "blockpress"
_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(config: Settings | None = None) -> logging.Logger:
    """Attach handlers to the ``blockpress`` logger.

    Safe to call more than once; handlers installed by a previous call are
    replaced rather than duplicated.
    """
    config = config or default_settings
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(config.log_level.upper())

    for handler in list(logger.handlers):
        if getattr(handler, "_blockpress", False):
            logger.removeHandler(handler)
            handler.close()

    formatter = logging.Formatter(_FORMAT)

    stream = logging.StreamHandler()
    stream.setFormatter(formatter)
    stream._blockpress = True  # type: ignore[attr-defined]
    logger.addHandler(stream)

    if config.log_path is not None:
        config.log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(
            config.log_path,
            maxBytes=config.log_max_bytes,
            backupCount=config.log_backup_count,
            encoding="utf-8",
        )
        file_handler.setFormatter(formatter)
        file_handler._blockpress = True  # type: ignore[attr-defined]
        logger.addHandler(file_handler)

    return logger
