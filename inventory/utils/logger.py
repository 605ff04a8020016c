# inventory/utils/logger.py
# Shared application logger: console output plus a process-safe rotating log file.

import logging
import os
import sys
from concurrent_log_handler import ConcurrentRotatingFileHandler
from typing import Optional

# --- Settings ---
LOG_DIRECTORY = os.path.join(os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__)))), "logs")
LOG_FILENAME_BASE = "inventory.log"
LOG_LEVEL_DEFAULT = "INFO"
LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - [%(filename)s:%(lineno)d | %(funcName)s] - %(message)s'
LOG_MAX_BYTES = 10 * 1024 * 1024  # 10 MB
LOG_BACKUP_COUNT = 10


def _resolve_level(level_str: str) -> int:
    numeric_level = getattr(logging, level_str.upper(), None)
    if not isinstance(numeric_level, int):
        print(f"Warning: invalid log level '{level_str}'. Falling back to {LOG_LEVEL_DEFAULT}.", file=sys.stderr)
        numeric_level = getattr(logging, LOG_LEVEL_DEFAULT)
    return numeric_level


class Logger:
    """Wraps logger setup with a ConcurrentRotatingFileHandler. Single instance per process."""
    _instance = None
    _logger = None

    def __new__(cls, *args, **kwargs):
        if cls._instance is None:
            cls._instance = super(Logger, cls).__new__(cls)
            cls._instance._initialized = False
        return cls._instance

    def __init__(self, name: str = "InventoryAPI", log_level: Optional[str] = None):
        if self._initialized:
            # Handlers are already attached; only the level may change.
            if log_level is not None:
                self._logger.setLevel(_resolve_level(log_level))
            return

        level_str = log_level
        if level_str is None:
            # Read the environment directly; importing config here would be circular.
            level_str = os.environ.get('LOG_LEVEL', LOG_LEVEL_DEFAULT)

        self._logger = logging.getLogger(name)
        self._logger.setLevel(_resolve_level(level_str))

        if not self._logger.handlers:
            formatter = logging.Formatter(LOG_FORMAT)

            console_handler = logging.StreamHandler(sys.stdout)
            console_handler.setFormatter(formatter)
            self._logger.addHandler(console_handler)

            try:
                os.makedirs(LOG_DIRECTORY, exist_ok=True)
                log_file_path = os.path.join(LOG_DIRECTORY, LOG_FILENAME_BASE)

                file_handler = ConcurrentRotatingFileHandler(
                    filename=log_file_path,
                    mode='a',
                    maxBytes=LOG_MAX_BYTES,
                    backupCount=LOG_BACKUP_COUNT,
                    encoding='utf-8',
                )
                file_handler.setFormatter(formatter)
                self._logger.addHandler(file_handler)
            except OSError as e:
                print(f"Could not configure file logging: {e}", file=sys.stderr)

        self._initialized = True

    def get_logger(self) -> logging.Logger:
        """Returns the configured logger instance."""
        if not self._logger:
            raise RuntimeError("Logger has not been initialized.")
        return self._logger


# Global logger instance
logger_instance = Logger()
logger = logger_instance.get_logger()


def configure_logger(level: str):
    """Re-applies the global log level (called by the app factory once config is loaded)."""
    global logger_instance, logger
    logger_instance = Logger(log_level=level)
    logger = logger_instance.get_logger()
