from __future__ import annotations

import logging
from pathlib import Path

from .config import ChamberConfig

APP_LOGGER = "bubble_chamber"


def setup_logging(config: ChamberConfig) -> logging.Logger:
    """Configure the dedicated application logger (not the root logger).

    Console output always; a file handler is added when ``config.log_file``
    is set. Calling this again replaces the handlers instead of stacking them.
    """

    logger = logging.getLogger(APP_LOGGER)
    logger.setLevel(config.log_level)
    logger.propagate = False

    formatter = logging.Formatter(config.log_format)

    if logger.hasHandlers():
        logger.handlers.clear()

    stream_handler = logging.StreamHandler()
    stream_handler.setFormatter(formatter)
    logger.addHandler(stream_handler)

    if config.log_file:
        log_path = Path(config.log_file).expanduser()
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_path, encoding="utf-8")
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    logger.debug("Logging initialized. Level: %s. Log file: %s", config.log_level, config.log_file)
    return logger
