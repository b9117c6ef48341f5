"""Logging setup for LGPD Guardian."""

from __future__ import annotations

import logging
import os
from logging.handlers import RotatingFileHandler

from guardian.config import config


def setup_logging(log_dir: str | None = None) -> logging.Logger:
    """Configure the ``guardian`` logger once; later calls are no-ops."""
    log_dir = log_dir or config.LOG_DIR
    os.makedirs(log_dir, exist_ok=True)

    logger = logging.getLogger("guardian")
    logger.setLevel(config.LOG_LEVEL)
    logger.propagate = False

    if not any(isinstance(h, RotatingFileHandler) for h in logger.handlers):
        text_path = os.path.join(log_dir, "guardian.log")
        h = RotatingFileHandler(text_path, maxBytes=1_000_000, backupCount=5, encoding="utf-8")
        h.setFormatter(logging.Formatter("%(asctime)s | %(levelname)s | %(name)s | %(message)s"))
        logger.addHandler(h)

    if not any(isinstance(h, logging.StreamHandler) and not isinstance(h, RotatingFileHandler) for h in logger.handlers):
        sh = logging.StreamHandler()
        sh.setFormatter(logging.Formatter("%(levelname)s %(name)s: %(message)s"))
        logger.addHandler(sh)

    return logger
