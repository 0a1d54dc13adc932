"""
HwrX — Logging setup

Attaches handlers to the package logger. Codec modules only ever call
``logging.getLogger(__name__)``; the CLI decides where records end up.
"""

import logging
import os
from typing import Optional

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logger(name: str = "hwrx", log_level: int = logging.INFO,
                 log_file: Optional[str] = None) -> logging.Logger:
    """Console handler on stderr, plus a file handler when ``log_file`` is given."""
    logger = logging.getLogger(name)
    logger.setLevel(log_level)

    if logger.handlers:
        return logger

    formatter = logging.Formatter(LOG_FORMAT)
    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if log_file:
        log_dir = os.path.dirname(log_file)
        if log_dir:
            os.makedirs(log_dir, exist_ok=True)
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    return logger
