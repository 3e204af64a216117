"""
Logging setup.

All application loggers live under the "haven" namespace and share one
stream handler.
"""

import logging
import sys

from haven.core.config import get_settings

_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
_ROOT_NAME = "haven"


def _configure_root() -> logging.Logger:
    root = logging.getLogger(_ROOT_NAME)
    if not root.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(_FORMAT))
        root.addHandler(handler)
        root.propagate = False
    root.setLevel(get_settings().LOG_LEVEL.upper())
    return root


def setup_logger(name: str) -> logging.Logger:
    """
    Get a logger attached to the shared application handler.

    Args:
        name: Module name (usually __name__)

    Returns:
        Configured logger
    """
    root = _configure_root()
    if name == _ROOT_NAME:
        return root
    if not name.startswith(f"{_ROOT_NAME}."):
        name = f"{_ROOT_NAME}.{name}"
    return logging.getLogger(name)


logger = setup_logger(_ROOT_NAME)
