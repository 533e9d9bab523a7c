"""Logging setup shared by the camera app and its modules."""

import logging
import sys

_CONSOLE_FMT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
_CONSOLE_DATEFMT = "%H:%M:%S"


def setup_logging(level=logging.INFO) -> logging.Logger:
    """
    Configure the root logger with a single console handler.
    Calling it again only updates the level.
    """
    root = logging.getLogger()
    root.setLevel(level)

    if not any(getattr(h, "_agrobrain", False) for h in root.handlers):
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(_CONSOLE_FMT, datefmt=_CONSOLE_DATEFMT))
        handler._agrobrain = True
        root.addHandler(handler)

    return root
