from __future__ import annotations

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

LOG_FORMAT = "[%(asctime)s] [%(levelname)s] [%(name)s] %(message)s"
ROOT_LOGGER = "qr_attendance"


def configure_logging(level: str = "INFO", log_dir: Optional[str] = None) -> logging.Logger:
    """Attach console and rotating file handlers to the package logger.

    Safe to call more than once; handlers are only added the first time.
    """

    logger = logging.getLogger(ROOT_LOGGER)
    logger.setLevel(getattr(logging, str(level).upper(), logging.INFO))

    if getattr(logger, "_qr_configured", False):
        return logger

    formatter = logging.Formatter(LOG_FORMAT)

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if log_dir:
        path = Path(log_dir)
        path.mkdir(exist_ok=True, parents=True)
        # rotates at 5MB
        file_handler = RotatingFileHandler(
            path / "attendance.log",
            maxBytes=5 * 1024 * 1024,
            backupCount=3,
            encoding="utf-8",
        )
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    logger._qr_configured = True  # type: ignore[attr-defined]
    logger.info("logging configured (level=%s, dir=%s)", level, log_dir or "-")
    return logger
