"""Logging helpers."""

from __future__ import annotations

import logging
import os
from logging.handlers import RotatingFileHandler

LOGGER_NAME = "campuspulse"


def get_logger(name: str | None = None) -> logging.Logger:
    if not name:
        return logging.getLogger(LOGGER_NAME)
    return logging.getLogger(f"{LOGGER_NAME}.{name}")


def parse_level(value: str | int) -> int:
    if isinstance(value, int):
        return value
    level = logging.getLevelName(str(value).upper())
    return level if isinstance(level, int) else logging.INFO


def setup_logging(
    log_dir: str = "logs", level: int | str = logging.INFO
) -> tuple[logging.Logger, str]:
    """Attach the rotating file handler once; later calls only change the level.

    ``level`` accepts the config spelling ("debug", "INFO") or a logging constant.
    """
    os.makedirs(log_dir, exist_ok=True)
    log_path = os.path.join(log_dir, "campuspulse.log")

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(parse_level(level))

    if not logger.handlers:
        handler = RotatingFileHandler(log_path, maxBytes=2_000_000, backupCount=3)
        fmt = logging.Formatter(
            "%(asctime)s %(levelname)s %(name)s %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
        handler.setFormatter(fmt)
        logger.addHandler(handler)

    return logger, log_path
