import logging
from typing import Optional

from config.settings import LOG_DATEFMT, LOG_FORMAT, LOG_LEVEL


def get_logger(name: str, level: Optional[int] = None) -> logging.Logger:
    logger = logging.getLogger(name)
    if not logger.handlers:
        handler = logging.StreamHandler()
        formatter = logging.Formatter(LOG_FORMAT, datefmt=LOG_DATEFMT)
        handler.setFormatter(formatter)
        logger.addHandler(handler)
        logger.propagate = False
    logger.setLevel(level if level is not None else LOG_LEVEL)
    return logger
