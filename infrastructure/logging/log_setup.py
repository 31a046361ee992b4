# infrastructure/logging/log_setup.py
import sys

from loguru import logger


def setup_console_logging(level: str = "INFO") -> None:
    logger.remove()
    logger.add(sys.stderr, level=level.upper(), format="{time:HH:mm:ss} {level: <5} {message}")
