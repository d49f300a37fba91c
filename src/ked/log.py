"""Logging setup.

The terminal is the editor's screen, so records only ever go to a file.
"""

from __future__ import annotations

import logging

LOGGER_NAME = "ked"
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(log_file: str = "", level: int = logging.DEBUG) -> logging.Logger:
    root = logging.getLogger(LOGGER_NAME)
    for handler in list(root.handlers):
        root.removeHandler(handler)
        handler.close()

    if log_file:
        handler: logging.Handler = logging.FileHandler(log_file, encoding="utf-8")
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        root.setLevel(level)
    else:
        handler = logging.NullHandler()
    root.addHandler(handler)
    root.propagate = False
    return root
