"""
Logging configuration for the panel scripts.
"""
import logging
import sys
from typing import Optional

# Loggers of the project's modules
LOGGER_NAMES = (
    "slot_layout",
    "panel_build123d",
    "organizer_panel_build123d",
    "bead_panel_build123d",
    "__main__",
)


def setup_logging(level: int = logging.INFO, log_file: Optional[str] = None) -> None:
    """
    Attach console (and optional file) handlers to the project's loggers.

    Args:
        level: Logging level (e.g. logging.DEBUG, logging.INFO)
        log_file: Optional path to also write the log to.
    """
    formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%H:%M:%S'
    )

    handlers: list[logging.Handler] = []

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    handlers.append(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file, mode='w', encoding='utf-8')
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        handlers.append(file_handler)

    for name in LOGGER_NAMES:
        logger = logging.getLogger(name)
        logger.setLevel(level)
        # Re-running a script in the same interpreter must not duplicate output
        if logger.hasHandlers():
            logger.handlers.clear()
        for handler in handlers:
            logger.addHandler(handler)
        logger.propagate = False
