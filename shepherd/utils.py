"""
Shared helpers.
"""
import logging
import sys

from shepherd.core import config

_ROOT_LOGGER = "shepherd"
_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def _configure_root() -> logging.Logger:
    root = logging.getLogger(_ROOT_LOGGER)
    if not root.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(_FORMAT))
        root.addHandler(handler)
        root.setLevel(config.LOG_LEVEL)
    return root


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger under the "shepherd" tree.

    Usage:
        log = get_logger(__name__)
        log.info("Running server")
    """
    _configure_root()
    if name == "__main__" or not name.startswith(_ROOT_LOGGER):
        name = f"{_ROOT_LOGGER}.{name}"
    return logging.getLogger(name)
