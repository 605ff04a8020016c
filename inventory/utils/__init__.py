# inventory/utils/__init__.py
# Makes 'utils' a package. Exports utility functions/classes.

from .logger import logger, configure_logger
from .rw_lock import ReadWriteLock

__all__ = [
    "logger",
    "configure_logger",
    "ReadWriteLock",
]
