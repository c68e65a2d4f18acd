"""
Logging Configuration
Sets up the loggers of the fem and simulator packages and the driver script.
"""
import logging
import sys
from typing import Optional, Sequence

namespaces = ("fem", "simulator", "tofu")


def setup_logging(level: int = logging.INFO, log_file: Optional[str] = None, names: Sequence[str] = namespaces) -> None:
    """
    Configures one console handler (and optionally a file handler) per namespace.

    Args:
        level: Logging level (e.g. logging.DEBUG, logging.INFO)
        log_file: Optional path to save logs to a file.
        names: Logger namespaces to configure.
    """
    formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%H:%M:%S'
    )
    file_handler = None
    if log_file:
        file_handler = logging.FileHandler(log_file, mode='w', encoding='utf-8')
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)

    for name in names:
        logger = logging.getLogger(name)
        logger.setLevel(level)

        # avoid duplicate logs when called again
        if logger.hasHandlers():
            logger.handlers.clear()

        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(level)
        console_handler.setFormatter(formatter)
        logger.addHandler(console_handler)
        if file_handler is not None:
            logger.addHandler(file_handler)

    logging.getLogger(names[0]).info("Logging initialized.")
