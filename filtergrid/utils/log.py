"""Logging setup shared by the library and the command line front end."""

import logging
from pathlib import Path
from typing import Optional, Union

LOGGER_NAME = "filtergrid"
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logging(
    level: Union[int, str] = logging.INFO,
    log_file: Optional[Union[str, Path]] = None,
) -> logging.Logger:
    """Configure the ``filtergrid`` logger.

    Handlers are attached once; calling again only adjusts the level.
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level)

    if not logger.handlers:
        formatter = logging.Formatter(LOG_FORMAT)

        console_handler = logging.StreamHandler()
        console_handler.setLevel(level)
        console_handler.setFormatter(formatter)
        logger.addHandler(console_handler)

        if log_file:
            log_path = Path(log_file)
            log_path.parent.mkdir(parents=True, exist_ok=True)
            file_handler = logging.FileHandler(log_path)
            file_handler.setLevel(level)
            file_handler.setFormatter(formatter)
            logger.addHandler(file_handler)
    else:
        for handler in logger.handlers:
            handler.setLevel(level)

    return logger


def get_logger(name: str) -> logging.Logger:
    """Return a child of the package logger, e.g. ``filtergrid.filter``."""
    return logging.getLogger(f"{LOGGER_NAME}.{name}")
