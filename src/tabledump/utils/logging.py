"""Logging setup with Rich console and optional file handlers."""

import logging
from pathlib import Path

from rich.console import Console
from rich.logging import RichHandler

console = Console(stderr=True)

# -v count -> level; without -v only critical messages are shown
VERBOSITY_LEVELS = [
    logging.CRITICAL,
    logging.ERROR,
    logging.WARNING,
    logging.INFO,
    logging.DEBUG,
]

_configured = False


def level_for_verbosity(verbosity: int) -> int:
    return VERBOSITY_LEVELS[min(max(verbosity, 0), len(VERBOSITY_LEVELS) - 1)]


def setup_logging(level: int = logging.INFO, log_file: Path | None = None) -> logging.Logger:
    """Configure and return the tabledump logger."""
    global _configured

    logger = logging.getLogger("tabledump")

    if _configured:
        return logger

    logger.setLevel(logging.DEBUG if log_file else level)

    console_handler = RichHandler(console=console, show_path=False, markup=False)
    console_handler.setLevel(level)
    logger.addHandler(console_handler)

    if log_file is not None:
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(logging.DEBUG)
        file_fmt = logging.Formatter("%(asctime)s %(levelname)-8s %(threadName)s %(message)s")
        file_handler.setFormatter(file_fmt)
        logger.addHandler(file_handler)

    _configured = True
    return logger
