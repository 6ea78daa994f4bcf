from __future__ import annotations

import logging
import sys

_FORMAT = "%(asctime)s [%(name)-20s] %(levelname)-7s %(message)s"


def setup_logging(level: int | str = logging.INFO) -> None:
    """Configure the root logger to write to stderr.

    stdout is left alone for CLI output.
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO

    root = logging.getLogger()
    root.setLevel(level)
    root.handlers.clear()

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(_FORMAT, datefmt="%H:%M:%S"))
    root.addHandler(handler)


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)
