#!/usr/bin/env python3
"""
logging_setup.py
================
Configures the root logger with a console handler and a rotating file
handler (``gridtraffic.log``, 1 MB, 2 backups).

Call :func:`setup_logging` once at startup before the simulation starts
emitting records.
"""

import logging
from logging.handlers import RotatingFileHandler


def setup_logging(level: int = logging.INFO) -> None:
    """Apply a unified log format to both console and file output.

    Parameters
    ----------
    level : int
        Minimum severity level (e.g. ``logging.DEBUG``, ``logging.INFO``).
    """
    root = logging.getLogger()
    root.setLevel(level)

    fmt = logging.Formatter(
        "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
    )

    ch = logging.StreamHandler()
    ch.setLevel(level)
    ch.setFormatter(fmt)

    fh = RotatingFileHandler("gridtraffic.log", maxBytes=1_000_000, backupCount=2)
    fh.setLevel(level)
    fh.setFormatter(fmt)

    root.handlers.clear()
    root.addHandler(ch)
    root.addHandler(fh)

    # ── Dedicated debug file for junction grants, queues and evictions ──
    arbiter_logger = logging.getLogger("arbiter")
    arbiter_logger.setLevel(logging.DEBUG)
    for handler in list(arbiter_logger.handlers):
        arbiter_logger.removeHandler(handler)
        handler.close()
    dfh = RotatingFileHandler(
        "arbiter_debug.log", maxBytes=5_000_000, backupCount=2
    )
    dfh.setLevel(logging.DEBUG)
    dfh.setFormatter(fmt)
    arbiter_logger.addHandler(dfh)
