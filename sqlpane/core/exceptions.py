"""
Custom Exceptions - Database client error classes.

This module defines a hierarchy of exceptions for clean error handling:
- Each exception has an error code and a user-facing message
- Driver exceptions are translated into these at the client boundary
- The UI converts every one of them into a displayed message; none of them
  terminates the event loop
"""
from typing import Optional


class DbError(Exception):
    """
    Base exception for all database client errors.

    Subclass this for specific error types.
    """
    error_code: str = "database_error"

    def __init__(self, message: str, details: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.details = details

    def __str__(self) -> str:
        return self.message

    def to_dict(self) -> dict:
        """Convert to an error description dict (used for debug output)."""
        return {
            "error": self.error_code,
            "message": self.message,
            "details": self.details
        }


class DatabaseConnectionError(DbError):
    """Raised when connecting fails (network, authentication, bad URL)."""
    error_code = "connection_error"

    def __init__(self, message: str = "Could not connect to the database"):
        super().__init__(message)


class ExecutionError(DbError):
    """Raised when a statement fails at the backend."""
    error_code = "execution_error"

    def __init__(self, message: str, sql: Optional[str] = None):
        super().__init__(message, details=f"sql={sql[:200]}" if sql else None)
        self.sql = sql


class TransactionError(DbError):
    """Raised when beginning, committing or rolling back a transaction fails."""
    error_code = "transaction_error"

    def __init__(self, message: str):
        super().__init__(message)


class NoConnectionError(DbError):
    """Raised when an operation runs while the connection registry is empty."""
    error_code = "no_connection"

    def __init__(self, message: str = "No database connection available."):
        super().__init__(message)


class UnsupportedOperationError(DbError):
    """Raised for backends the UI does not support yet."""
    error_code = "unsupported_operation"

    def __init__(self, backend: str):
        super().__init__(
            message=f"{backend} is not implemented yet.",
            details=f"backend={backend}"
        )
        self.backend = backend


class DecodeError(ValueError):
    """
    Raised by ColumnType.decode when a native value does not fit its category.

    Never escapes the type layer: to_canonical() turns it into NULL.
    """
