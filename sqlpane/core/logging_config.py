"""
Centralized logging configuration.

This module provides consistent logging across all application modules.
Logs go to a file only: the terminal is owned by the UI while it runs, so a
console handler would draw over the screen.

Logging is off unless SQLPANE_LOG_LEVEL is set to a level name.
"""
import logging
from pathlib import Path
from typing import Optional


# Module-level flag to prevent duplicate handler registration
_logging_configured = False


def setup_logging(log_level: str = "OFF", log_file: Optional[Path] = None) -> logging.Logger:
    """
    Configure application-wide logging.

    This function should be called once at application startup.

    Args:
        log_level: Logging level (OFF, DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Path of the log file. Defaults to 'sqlpane-debug.log' in the
            working directory.

    Returns:
        Configured root logger instance

    Example:
        >>> from sqlpane.core.logging_config import setup_logging
        >>> logger = setup_logging("DEBUG", Path("/tmp/sqlpane.log"))
        >>> logger.info("Application started")
    """
    global _logging_configured

    # Prevent duplicate handler registration on repeated calls
    if _logging_configured:
        return logging.getLogger()

    root_logger = logging.getLogger()

    if log_level.upper() == "OFF":
        # Swallow records instead of letting logging fall back to stderr
        root_logger.addHandler(logging.NullHandler())
        root_logger.setLevel(logging.CRITICAL + 1)
        _logging_configured = True
        return root_logger

    if log_file is None:
        log_file = Path("sqlpane-debug.log")
    log_file.parent.mkdir(parents=True, exist_ok=True)

    # Format: timestamp | level | module:line | message
    formatter = logging.Formatter(
        fmt="%(asctime)s | %(levelname)-8s | %(name)s:%(lineno)d | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S"
    )

    file_handler = logging.FileHandler(log_file, mode="a", encoding="utf-8")
    file_handler.setFormatter(formatter)
    file_handler.setLevel(getattr(logging, log_level.upper(), logging.DEBUG))

    root_logger.setLevel(logging.DEBUG)
    root_logger.addHandler(file_handler)

    # Drivers log every statement and pool checkout at DEBUG
    logging.getLogger("sqlalchemy").setLevel(logging.WARNING)
    logging.getLogger("asyncio").setLevel(logging.WARNING)
    logging.getLogger("aiomysql").setLevel(logging.WARNING)
    logging.getLogger("aiosqlite").setLevel(logging.WARNING)

    _logging_configured = True

    root_logger.debug(f"Logging configured: level={log_level}, file={log_file}")

    return root_logger


def get_logger(name: str) -> logging.Logger:
    """
    Module logger; pass __name__ so records carry the sqlpane.* hierarchy.

    Args:
        name: Dotted logger name

    Returns:
        The named logger (handlers come from setup_logging)
    """
    return logging.getLogger(name)


class LoggerMixin:
    """
    Gives handlers, clients and the registry a per-class self.logger.

    Records are named after the concrete class (PostgresClient,
    ConnectionRegistry...), so the log file shows which backend spoke.

    Example:
        >>> class PostgresClient(LoggerMixin):
        ...     async def list_tables(self):
        ...         self.logger.debug("Listing tables")
    """

    @property
    def logger(self) -> logging.Logger:
        return get_logger(type(self).__name__)
