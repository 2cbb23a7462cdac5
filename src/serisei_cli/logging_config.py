import os
import sys

from loguru import logger


def setup_logging(level: str = "INFO") -> None:
    """
    Configures the global logger for a CLI run.

    Replaces any existing handlers with one stderr sink, so calling it again
    only changes the level. SERISEI_LOG_LEVEL overrides ``level``.
    """
    level = os.getenv("SERISEI_LOG_LEVEL", level).upper()
    logger.remove()
    logger.add(
        sys.stderr,
        level=level,
        format="<level>{level: <8}</level> | <cyan>{name}</cyan> - <level>{message}</level>",
        colorize=None,
    )
