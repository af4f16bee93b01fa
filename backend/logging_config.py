"""Logging setup shared by the server and the cleanup script."""

import logging
import sys

from config import LOG_LEVEL

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def setup_logging(log_level: str | None = None) -> logging.Logger:
    """
    Configure the root logger once.

    Args:
        log_level: DEBUG, INFO, WARNING or ERROR. Defaults to LOG_LEVEL.

    Returns:
        The root logger
    """
    level = getattr(logging, (log_level or LOG_LEVEL).upper(), logging.INFO)

    root = logging.getLogger()
    root.setLevel(level)

    if root.handlers:
        return root

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))

    root.addHandler(handler)
    return root
