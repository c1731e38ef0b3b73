"""Centralized logging configuration for PyBycatch."""

import logging
import sys
from pathlib import Path
from typing import Optional, Union

LOGGER_NAME = "pybycatch"

# Package logger; handlers are attached by setup_logging()
logger = logging.getLogger(LOGGER_NAME)
logger.addHandler(logging.NullHandler())

formatter = logging.Formatter(
    "%(asctime)s - %(name)s - %(levelname)s - %(filename)s:%(lineno)d - %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)


def setup_logging(
    level: int = logging.INFO, log_file: Optional[Union[str, Path]] = None
) -> logging.Logger:
    """Attach console (and optionally file) handlers to the package logger.

    Parameters
    ----------
    level : int
        Level of the console handler.
    log_file : str or Path, optional
        If given, DEBUG and above are also written to this file.

    Returns
    -------
    logging.Logger
        The configured package logger.
    """
    logger.setLevel(logging.DEBUG)

    for handler in list(logger.handlers):
        if getattr(handler, "_pybycatch", False):
            logger.removeHandler(handler)
            handler.close()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    console_handler._pybycatch = True
    logger.addHandler(console_handler)

    if log_file is not None:
        log_file = Path(log_file)
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file)
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(formatter)
        file_handler._pybycatch = True
        logger.addHandler(file_handler)

    return logger


def get_logger(name: str = None):
    """Get a logger instance.

    Parameters
    ----------
    name : str, optional
        Logger name (typically __name__). If None, returns the package logger.

    Returns
    -------
    logging.Logger
        Logger below the ``pybycatch`` hierarchy
    """
    if name:
        if name == LOGGER_NAME or name.startswith(LOGGER_NAME + "."):
            return logging.getLogger(name)
        return logging.getLogger(f"{LOGGER_NAME}.{name}")
    return logger
