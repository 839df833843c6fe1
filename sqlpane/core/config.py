"""
Configuration management via environment variables.

This module loads configuration from a .env file using python-dotenv.
All configuration values are accessed through the Settings class.

Why environment variables:
1. Secrets (default password) never live in the repository
2. Log verbosity can be switched on per run without a flag
3. Limits (timeouts, row caps) can be tuned without code changes
"""
import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv


# Load .env from the current working directory (where the client is started)
# This must happen before accessing os.environ
load_dotenv(Path.cwd() / ".env")


@dataclass(frozen=True)
class Settings:
    """
    Application settings loaded from environment variables.

    frozen=True makes the dataclass immutable, preventing accidental
    modification of settings at runtime.

    Attributes:
        app_name: Application identifier used in the title bar and logs
        log_level: Logging verbosity (OFF, DEBUG, INFO, WARNING, ERROR)
        log_file: Path of the log file (the terminal belongs to the UI)
        refresh_timeout_seconds: Upper bound for database/table list fetches
        max_result_rows: Data rows retained per query result
        pool_size: Connections kept by each backend client
        debug_buffer_size: Entries kept in the in-app debug ring buffer
        default_username: Pre-filled username on the connection form
        default_password: Pre-filled password on the connection form
        default_hostname: Pre-filled hostname on the connection form
        default_port: Pre-filled port on the connection form
    """
    # Application settings
    app_name: str
    log_level: str
    log_file: str

    # Limits
    refresh_timeout_seconds: float
    max_result_rows: int
    pool_size: int
    debug_buffer_size: int

    # Connection form defaults
    default_username: str
    default_password: str
    default_hostname: str
    default_port: str

    def logging_enabled(self) -> bool:
        """Check if logging was switched on through the environment."""
        return self.log_level.upper() != "OFF"


def _get_env(key: str, default: Optional[str] = None) -> str:
    """
    Get environment variable with optional default.

    Args:
        key: Environment variable name
        default: Default value if not set

    Returns:
        Environment variable value

    Raises:
        ValueError: If required variable is not set and no default provided
    """
    value = os.environ.get(key, default)
    if value is None:
        raise ValueError(
            f"Required environment variable '{key}' is not set. "
            f"Please check your .env file."
        )
    return value


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Why lru_cache:
    - Settings are read once at startup
    - Avoids re-reading the environment on every access
    - maxsize=1 ensures only one instance exists

    Returns:
        Settings instance with all configuration values
    """
    return Settings(
        # Application
        app_name=_get_env("SQLPANE_APP_NAME", "sqlpane"),
        log_level=_get_env("SQLPANE_LOG_LEVEL", "OFF"),
        log_file=_get_env("SQLPANE_LOG_FILE", "sqlpane-debug.log"),

        # Limits
        refresh_timeout_seconds=float(_get_env("SQLPANE_REFRESH_TIMEOUT", "5")),
        max_result_rows=int(_get_env("SQLPANE_MAX_RESULT_ROWS", "1000")),
        pool_size=int(_get_env("SQLPANE_POOL_SIZE", "5")),
        debug_buffer_size=int(_get_env("SQLPANE_DEBUG_BUFFER_SIZE", "100")),

        # Connection form (same variable names as the usual DB_* convention)
        default_username=_get_env("DB_USER", ""),
        default_password=_get_env("DB_PASSWORD", ""),
        default_hostname=_get_env("DB_HOST", ""),
        default_port=_get_env("DB_PORT", ""),
    )
