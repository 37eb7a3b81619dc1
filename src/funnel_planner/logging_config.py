"""
Logging setup for the funnel planner scripts.
Library modules only create module-level loggers; handlers are installed here.
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Optional


class ColoredFormatter(logging.Formatter):
    """Console formatter that colors the level name"""

    COLORS = {
        "DEBUG": "\033[36m",  # Cyan
        "INFO": "\033[32m",  # Green
        "WARNING": "\033[33m",  # Yellow
        "ERROR": "\033[31m",  # Red
        "CRITICAL": "\033[35m",  # Magenta
        "RESET": "\033[0m",
    }

    def format(self, record):
        original = record.levelname
        level_color = self.COLORS.get(original, self.COLORS["RESET"])
        record.levelname = f"{level_color}{original}{self.COLORS['RESET']}"
        try:
            return super().format(record)
        finally:
            record.levelname = original


def setup_logging(
    level: str = "INFO",
    log_file_path: Optional[str] = None,
    use_colors: bool = True,
) -> logging.Logger:
    """
    Configure the root logger

    Args:
        level: Logging level name (DEBUG, INFO, WARNING, ERROR)
        log_file_path: When given, also log everything at DEBUG to this file
        use_colors: Color the console level names
    """
    numeric_level = getattr(logging, level.upper(), logging.INFO)

    logger = logging.getLogger()
    logger.setLevel(logging.DEBUG if log_file_path else numeric_level)
    logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(numeric_level)
    console_pattern = "%(asctime)s | %(levelname)s | %(name)s:%(lineno)d | %(message)s"
    if use_colors:
        console_handler.setFormatter(ColoredFormatter(console_pattern, datefmt="%H:%M:%S"))
    else:
        console_handler.setFormatter(logging.Formatter(console_pattern, datefmt="%H:%M:%S"))
    logger.addHandler(console_handler)

    if log_file_path:
        log_path = Path(log_file_path)
        log_path.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.FileHandler(log_path, mode="a", encoding="utf-8")
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(
            logging.Formatter(
                "%(asctime)s | %(levelname)-8s | %(name)-24s:%(lineno)-4d | %(funcName)-20s | %(message)s",
                datefmt="%Y-%m-%d %H:%M:%S",
            )
        )
        logger.addHandler(file_handler)
        logger.info(f"Log file: {log_path.absolute()}")

    return logger
