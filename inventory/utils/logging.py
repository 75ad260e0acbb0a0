# inventory/utils/logging.py
import logging
import sys

from inventory.utils.settings import LOG_LEVEL, LOG_FILE

_FORMAT = "%(asctime)s [%(name)s] %(levelname)s: %(message)s"
_DATEFMT = "%Y-%m-%d %H:%M:%S"


def _coerce_level(value) -> int:
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        level = logging.getLevelName(value.strip().upper())
        if isinstance(level, int):
            return level
    return logging.INFO


def get_logger(name: str) -> logging.Logger:
    """
    Stdout logger with the shared format.
    LOG_LEVEL sets the level, LOG_FILE (optional) adds a file handler.
    """
    logger = logging.getLogger(name)
    if getattr(logger, "_inventory_configured", False):
        return logger

    level = _coerce_level(LOG_LEVEL)
    logger.setLevel(level)
    formatter = logging.Formatter(fmt=_FORMAT, datefmt=_DATEFMT)

    sh = logging.StreamHandler(sys.stdout)
    sh.setLevel(level)
    sh.setFormatter(formatter)
    logger.addHandler(sh)

    if LOG_FILE:
        try:
            fh = logging.FileHandler(LOG_FILE, encoding="utf-8")
        except OSError:
            logger.warning(f"LOG_FILE {LOG_FILE} could not be opened, logging to stdout only")
        else:
            fh.setLevel(level)
            fh.setFormatter(formatter)
            logger.addHandler(fh)

    logger.propagate = False
    setattr(logger, "_inventory_configured", True)
    return logger
