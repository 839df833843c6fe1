"""
Core module - Configuration and cross-cutting concerns.

This module provides:
- config.py         : Environment-based configuration management
- logging_config.py : Centralized logging setup
- exceptions.py     : Database client error hierarchy
"""
from sqlpane.core.config import get_settings, Settings
from sqlpane.core.logging_config import setup_logging, get_logger, LoggerMixin
from sqlpane.core.exceptions import (
    DbError,
    DatabaseConnectionError,
    ExecutionError,
    TransactionError,
    NoConnectionError,
    UnsupportedOperationError,
    DecodeError,
)

__all__ = [
    "get_settings",
    "Settings",
    "setup_logging",
    "get_logger",
    "LoggerMixin",
    "DbError",
    "DatabaseConnectionError",
    "ExecutionError",
    "TransactionError",
    "NoConnectionError",
    "UnsupportedOperationError",
    "DecodeError",
]
