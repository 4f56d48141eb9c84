"""
Logging setup for qrtransfer.

Modules get a logger with:
    from qrtransfer.logging import get_logger
    logger = get_logger(__name__)

The app entry point calls configure_logging() once.
"""

import logging
import sys

DEFAULT_FORMAT = "[%(levelname)s] %(name)s - %(message)s"

# Subsystem tags prefixed to log messages
CHUNKING = "[CHUNKING]"
REASSEMBLY = "[REASSEMBLY]"
SESSION = "[SESSION]"
QR = "[QR]"
API = "[API]"


def configure_logging(level=logging.INFO, fmt: str = DEFAULT_FORMAT, stream=sys.stdout):
    """
    Configure the root logging handler.

    Safe to call more than once; a second handler is never added.
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO

    root = logging.getLogger()
    if not root.handlers:
        handler = logging.StreamHandler(stream)
        handler.setFormatter(logging.Formatter(fmt))
        root.addHandler(handler)

    root.setLevel(level)


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)
