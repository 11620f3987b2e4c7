import logging
from logging import Logger

DEFAULT_FORMAT = "[%(asctime)s] %(levelname)s %(name)s: %(message)s"
DEFAULT_DATEFMT = "%H:%M:%S"


def setup_logging(level: int | str = logging.INFO) -> Logger:
    """Configure root logging once; accepts a level number or name ("DEBUG")."""
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO
    logging.basicConfig(level=level, format=DEFAULT_FORMAT, datefmt=DEFAULT_DATEFMT)
    logger = logging.getLogger("senkai")
    logger.setLevel(level)
    logger.debug("Logging initialized.")
    return logger
