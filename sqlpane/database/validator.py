"""
Statement classification for the SQL editor.

The editor routes a statement by its leading keyword: SELECT statements
return a result set, anything else is executed for its side effects.
"""
from sqlpane.core.logging_config import get_logger

logger = get_logger(__name__)


def is_blank(sql: str) -> bool:
    """True when the statement has no non-whitespace characters."""
    return not sql or not sql.strip()


def is_select(sql: str) -> bool:
    """
    Check if SQL is a SELECT statement.

    Only the trimmed, case-insensitive prefix is inspected: WITH ... SELECT
    and parenthesized selects are executed as statements.

    Example:
        >>> is_select("  select name FROM users")
        True
        >>> is_select("INSERT INTO users VALUES (1)")
        False
    """
    result = sql.strip().upper().startswith("SELECT")
    logger.debug(f"Statement classified as {'SELECT' if result else 'non-SELECT'}: {sql.strip()[:50]}")
    return result
