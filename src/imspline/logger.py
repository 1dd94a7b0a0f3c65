"""Logging setup for imspline.

The package logger carries a ``NullHandler`` so that library use stays silent;
the command line attaches real handlers through :func:`setup_logger`.
"""

from __future__ import annotations

import logging
import sys
from datetime import datetime
from pathlib import Path

_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
_FORMAT = "[%(asctime)s] %(levelname)s - %(name)s - %(message)s"
# debug runs also name the emitting function
_DEBUG_FORMAT = "[%(asctime)s] %(levelname)s - %(name)s.%(funcName)s - %(message)s"


def setup_logger(
    name: str = "imspline",
    level: int = logging.INFO,
    log_file: bool = False,
    log_dir: str | Path = "logs",
) -> logging.Logger:
    """Configure and return the package logger.

    Repeated calls never duplicate handlers: they update the level and the
    format of the existing ones, and add the file handler when ``log_file`` is
    requested for the first time.

    Args:
        name (str): Logger name. Defaults to "imspline".
        level (int): Logging level; at ``DEBUG`` records also show the emitting
            function. Defaults to ``logging.INFO``.
        log_file (bool): Also write to ``imspline_<date>.log`` in ``log_dir``.
            Defaults to False.
        log_dir (str | Path): Directory of the log file. Defaults to "logs".

    Returns:
        logging.Logger: The configured logger.
    """
    log = logging.getLogger(name)
    log.setLevel(level)

    # FileHandler derives from StreamHandler, hence the exact type check
    if not any(type(h) is logging.StreamHandler for h in log.handlers):
        log.addHandler(logging.StreamHandler(sys.stdout))

    if log_file and not any(isinstance(h, logging.FileHandler) for h in log.handlers):
        directory = Path(log_dir)
        directory.mkdir(parents=True, exist_ok=True)
        log.addHandler(
            logging.FileHandler(
                directory / f"imspline_{datetime.now():%Y%m%d}.log", encoding="utf-8"
            )
        )

    formatter = logging.Formatter(
        _DEBUG_FORMAT if level <= logging.DEBUG else _FORMAT, datefmt=_DATE_FORMAT
    )
    for handler in log.handlers:
        handler.setFormatter(formatter)
    return log


logger = logging.getLogger("imspline")
logger.addHandler(logging.NullHandler())


__all__ = [
    "logger",
    "setup_logger",
]
