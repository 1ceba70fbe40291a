import logging
import sys
from settings import load_settings

ROOT_LOGGER_NAME = "flowbit"
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def resolve_level(level_name):
    """Maps a level name like 'DEBUG' to its number; unknown names fall back to INFO."""
    level = logging.getLevelName(str(level_name).upper())
    return level if isinstance(level, int) else logging.INFO


def _configure_root():
    root = logging.getLogger(ROOT_LOGGER_NAME)
    if root.handlers:
        return root

    root.setLevel(resolve_level(load_settings().log_level))
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    root.addHandler(handler)
    root.propagate = False
    return root


def get_logger(name=None):
    """Returns a logger under the shared `flowbit` namespace."""
    root = _configure_root()
    if not name:
        return root
    return logging.getLogger(f"{ROOT_LOGGER_NAME}.{name}")
