# inventory/config/settings.py
# Loads environment variables and defines the application configuration.

from dataclasses import dataclass, field
from typing import Optional
from dotenv import load_dotenv
import os
import logging
import sys
from urllib.parse import quote_plus  # For passwords in the URL

# Determine the project root directory dynamically
PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))
dotenv_path = os.path.join(PROJECT_ROOT, '.env')
load_dotenv(dotenv_path=dotenv_path)


@dataclass
class Config:
    """
    Application configuration loaded from environment variables.
    Provides type hints and default values.
    """
    # Flask Settings
    SECRET_KEY: str = field(default_factory=lambda: os.environ.get('SECRET_KEY', 'default_secret_key_change_me_in_env'))
    APP_HOST: str = field(default_factory=lambda: os.environ.get('APP_HOST', '0.0.0.0'))
    APP_PORT: int = field(default_factory=lambda: int(os.environ.get('APP_PORT', 5000)))
    APP_DEBUG: bool = field(default_factory=lambda: os.environ.get('APP_DEBUG', 'False').lower() == 'true')
    LOG_LEVEL: str = field(default_factory=lambda: os.environ.get('LOG_LEVEL', 'INFO').upper())

    # --- Database Settings ---
    DB_TYPE: str = field(default_factory=lambda: os.environ.get('DB_TYPE', 'MYSQL').upper())

    # MySQL Specific Settings (read from .env)
    MYSQL_HOST: str = field(default_factory=lambda: os.environ.get('MYSQL_HOST', 'localhost'))
    MYSQL_PORT: int = field(default_factory=lambda: int(os.environ.get('MYSQL_PORT', 3306)))
    MYSQL_USER: str = field(default_factory=lambda: os.environ.get('MYSQL_USER', ''))
    MYSQL_PASSWORD: str = field(default_factory=lambda: os.environ.get('MYSQL_PASSWORD', ''))
    MYSQL_DB: str = field(default_factory=lambda: os.environ.get('MYSQL_DB', 'inventorydb'))

    # SQLite file (DB_TYPE=SQLITE), relative paths resolve against PROJECT_ROOT
    DATABASE_PATH: str = field(default_factory=lambda: os.environ.get('DATABASE_PATH', ''))

    # Schema qualifying the products table; empty means "connection default".
    DB_SCHEMA: Optional[str] = field(default_factory=lambda: os.environ.get('DB_SCHEMA'))

    # --- SQLAlchemy Database URL ---
    # Constructed based on the DB_TYPE and specific settings
    SQLALCHEMY_DATABASE_URI: Optional[str] = None

    # Connection pool sizing; the gateway runs one worker per possible connection.
    DB_POOL_SIZE: int = field(default_factory=lambda: int(os.environ.get('DB_POOL_SIZE', 10)))
    DB_MAX_OVERFLOW: int = field(default_factory=lambda: int(os.environ.get('DB_MAX_OVERFLOW', 20)))

    # --- Per-call deadlines for the product repository (seconds) ---
    PRODUCT_QUERY_TIMEOUT_SECONDS: float = field(default_factory=lambda: float(os.environ.get('PRODUCT_QUERY_TIMEOUT_SECONDS', 15)))
    PRODUCT_REPORT_TIMEOUT_SECONDS: float = field(default_factory=lambda: float(os.environ.get('PRODUCT_REPORT_TIMEOUT_SECONDS', 3)))

    def __post_init__(self):
        # Validate log level
        valid_levels = list(logging._nameToLevel.keys())
        if self.LOG_LEVEL not in valid_levels:
            print(f"Warning: Invalid LOG_LEVEL '{self.LOG_LEVEL}'. Valid levels: {valid_levels}. Defaulting to INFO.", file=sys.stderr)
            self.LOG_LEVEL = 'INFO'

        # --- Build SQLAlchemy Database URI ---
        if self.DB_TYPE == 'MYSQL':
            if not all([self.MYSQL_HOST, self.MYSQL_USER, self.MYSQL_DB]):
                print("Warning: Missing MySQL connection details in environment variables. Database connection will likely fail.", file=sys.stderr)
                self.SQLALCHEMY_DATABASE_URI = None
            else:
                encoded_password = quote_plus(self.MYSQL_PASSWORD)
                self.SQLALCHEMY_DATABASE_URI = f"mysql+pymysql://{self.MYSQL_USER}:{encoded_password}@{self.MYSQL_HOST}:{self.MYSQL_PORT}/{self.MYSQL_DB}"
            if self.DB_SCHEMA is None:
                self.DB_SCHEMA = self.MYSQL_DB
        elif self.DB_TYPE == 'SQLITE':
            if self.DATABASE_PATH:
                abs_path = os.path.join(PROJECT_ROOT, self.DATABASE_PATH) if not os.path.isabs(self.DATABASE_PATH) else self.DATABASE_PATH
                os.makedirs(os.path.dirname(abs_path), exist_ok=True)
                self.SQLALCHEMY_DATABASE_URI = f"sqlite:///{abs_path}"
            else:
                print("Warning: DB_TYPE is SQLITE but DATABASE_PATH is not set.", file=sys.stderr)
                self.SQLALCHEMY_DATABASE_URI = None
        else:
            print(f"Warning: Unsupported DB_TYPE '{self.DB_TYPE}'. No database URI configured.", file=sys.stderr)
            self.SQLALCHEMY_DATABASE_URI = None

        # An empty DB_SCHEMA in the environment means "no schema qualifier"
        if not self.DB_SCHEMA:
            self.DB_SCHEMA = None

        for name in ('PRODUCT_QUERY_TIMEOUT_SECONDS', 'PRODUCT_REPORT_TIMEOUT_SECONDS'):
            if getattr(self, name) <= 0:
                print(f"Warning: {name} must be positive. Resetting to default.", file=sys.stderr)
                setattr(self, name, 15.0 if name == 'PRODUCT_QUERY_TIMEOUT_SECONDS' else 3.0)

        if self.DB_POOL_SIZE < 1:
            print("Warning: DB_POOL_SIZE must be at least 1. Resetting to default.", file=sys.stderr)
            self.DB_POOL_SIZE = 10
        if self.DB_MAX_OVERFLOW < 0:
            print("Warning: DB_MAX_OVERFLOW cannot be negative. Resetting to default.", file=sys.stderr)
            self.DB_MAX_OVERFLOW = 20

    def masked_database_uri(self) -> str:
        """Database URI with the password replaced, safe for logging."""
        db_uri_log = str(self.SQLALCHEMY_DATABASE_URI)
        if self.MYSQL_PASSWORD:
            db_uri_log = db_uri_log.replace(quote_plus(self.MYSQL_PASSWORD), '********')
        return db_uri_log


# Singleton instance, created by load_config
_config_instance: Optional[Config] = None


def load_config() -> Config:
    """Loads or returns the singleton Config instance."""
    global _config_instance
    if _config_instance is None:
        _config_instance = Config()
        print("--- Configuration Loaded ---")
        print(f"  APP_HOST: {_config_instance.APP_HOST}")
        print(f"  APP_PORT: {_config_instance.APP_PORT}")
        print(f"  APP_DEBUG: {_config_instance.APP_DEBUG}")
        print(f"  LOG_LEVEL: {_config_instance.LOG_LEVEL}")
        print(f"  DB_TYPE: {_config_instance.DB_TYPE}")
        print(f"  SQLALCHEMY_DATABASE_URI: {_config_instance.masked_database_uri()}")
        print(f"  DB_SCHEMA: {_config_instance.DB_SCHEMA or 'Not Set'}")
        print(f"  DB_POOL_SIZE / DB_MAX_OVERFLOW: {_config_instance.DB_POOL_SIZE} / {_config_instance.DB_MAX_OVERFLOW}")
        print(f"  PRODUCT_QUERY_TIMEOUT_SECONDS: {_config_instance.PRODUCT_QUERY_TIMEOUT_SECONDS}")
        print(f"  PRODUCT_REPORT_TIMEOUT_SECONDS: {_config_instance.PRODUCT_REPORT_TIMEOUT_SECONDS}")
        print("--------------------------")
    return _config_instance


# Expose the singleton instance directly
config = load_config()


def get_project_root() -> str:
    return PROJECT_ROOT
