"""Logging setup for the fantasy engine."""
from __future__ import annotations

import logging
import sys
from datetime import datetime
from pathlib import Path

ROOT_LOGGER = "pickleball_fantasy"


def setup_logging(
    level: int | str = logging.INFO,
    log_dir: Path | None = None,
    log_to_console: bool = True,
) -> logging.Logger:
    """
    Configure the package logger.

    Console output uses a short format; when log_dir is given a timestamped
    file handler with source locations is added as well. Calling this twice
    replaces the previous handlers.
    """
    logger = logging.getLogger(ROOT_LOGGER)
    logger.setLevel(level)
    logger.handlers = []

    detailed_formatter = logging.Formatter(
        "%(asctime)s - %(name)s - %(levelname)s - [%(filename)s:%(lineno)d] - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    simple_formatter = logging.Formatter("%(levelname)s %(name)s: %(message)s")

    if log_dir is not None:
        log_dir.mkdir(parents=True, exist_ok=True)
        log_file = log_dir / f"fantasy_{datetime.now().strftime('%Y%m%d_%H%M%S')}.log"
        file_handler = logging.FileHandler(log_file)
        file_handler.setLevel(level)
        file_handler.setFormatter(detailed_formatter)
        logger.addHandler(file_handler)

    if log_to_console:
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(level)
        console_handler.setFormatter(simple_formatter)
        logger.addHandler(console_handler)

    return logger
