"""
Logging configuration for the 'spacetime' logger namespace.
"""

import logging
import sys


def setup_logging(level=logging.INFO, log_file=None):
    """
    Configure the 'spacetime' logger.

    Parameters
    ----------
    level : int
        Logging level (e.g. logging.DEBUG).
    log_file : str, optional
        Also write log records to this file.

    Returns
    -------
    logging.Logger
        The configured package logger.
    """
    logger = logging.getLogger("spacetime")
    logger.setLevel(level)

    # Avoid duplicate output when called again (app reload, CLI reruns)
    if logger.hasHandlers():
        logger.handlers.clear()

    formatter = logging.Formatter(
        "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%H:%M:%S",
    )

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file, mode="w", encoding="utf-8")
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    logger.debug("Logging initialized.")
    return logger
