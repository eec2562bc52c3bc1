import logging
import os
from typing import Optional

PACKAGE = "vidsift"
LEVEL_ENV = "VIDSIFT_LOG_LEVEL"

_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(threadName)s | %(message)s"

_override: Optional[int] = None


def get_logger(name: str) -> logging.Logger:
    logger = logging.getLogger(name)
    if logger.handlers:
        return logger

    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(_FORMAT))
    logger.addHandler(handler)
    logger.propagate = False
    logger.setLevel(_resolve_level(name))
    return logger


def set_package_level(level: int) -> None:
    """Force every vidsift logger, existing and future, to ``level``."""
    global _override
    _override = level
    for name, logger in logging.Logger.manager.loggerDict.items():
        if isinstance(logger, logging.Logger) and (name == PACKAGE or name.startswith(PACKAGE + ".")):
            logger.setLevel(level)


def _resolve_level(name: str) -> int:
    if _override is not None:
        return _override

    # WARNING for library modules so sampling workers stay quiet, INFO for
    # the CLI. The environment variable overrides both.
    default_level = logging.INFO if name.endswith('.cli') else logging.WARNING

    level_name = os.getenv(LEVEL_ENV)
    if not level_name:
        return default_level
    level = logging.getLevelName(level_name.upper())
    return level if isinstance(level, int) else default_level
