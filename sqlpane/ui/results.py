"""
Query result buffer and viewport windowing.

This module provides:
- ResultSet: the ingested result (header + rows of display strings)
- ResultWindow: selection and scroll offsets, always kept in range
- visible_slice(): the cells to draw for the current viewport
- Cell cleaning for display and tab-separated clipboard text

Why windowing is separate from rendering:
1. Offsets are clamped in one place, whatever key moved them
2. The slice is a pure function, testable without a terminal
3. Large results never build widgets for off-screen rows
"""
import unicodedata
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Sequence, Tuple

from sqlpane.core.logging_config import get_logger

logger = get_logger(__name__)

MAX_RESULT_ROWS = 1000
MAX_VISIBLE_COLUMNS = 8
PAGE_SIZE = 10
MAX_CELL_WIDTH = 100
TRUNCATED_CELL_WIDTH = 97

TRUNCATION_MESSAGE = "Results limited to {max_rows} rows for performance"


@dataclass(frozen=True)
class QueryResultRow:
    """One result row: (column, display string) pairs in column order."""
    pairs: Tuple[Tuple[str, str], ...]

    def keys(self) -> List[str]:
        return [key for key, _ in self.pairs]

    def values(self) -> List[str]:
        return [value for _, value in self.pairs]

    def get(self, column: str, default: Optional[str] = None) -> Optional[str]:
        for key, value in self.pairs:
            if key == column:
                return value
        return default

    def __len__(self) -> int:
        return len(self.pairs)


@dataclass
class ResultSet:
    """Rows of the last executed query; every row has the header's keys."""
    header: List[str] = field(default_factory=list)
    rows: List[QueryResultRow] = field(default_factory=list)
    truncated: bool = False

    @property
    def total_rows(self) -> int:
        return len(self.rows)

    @property
    def total_columns(self) -> int:
        return len(self.header)

    def is_empty(self) -> bool:
        return not self.rows


def ingest_result(
    header: Sequence[str],
    rows: Sequence[Sequence[str]],
    max_rows: int = MAX_RESULT_ROWS,
    debug: Optional[Callable[[str], None]] = None,
) -> ResultSet:
    """
    Build a ResultSet from a query's header and display rows.

    Args:
        header: Column names in result order
        rows: Display strings per row
        max_rows: Rows beyond this cap are discarded
        debug: Receives one message per dropped row

    Returns:
        ResultSet; truncated is True when rows were discarded
    """
    header = list(header)
    truncated = len(rows) > max_rows
    kept: List[QueryResultRow] = []
    for index, values in enumerate(rows[:max_rows]):
        if len(values) != len(header):
            message = f"Row {index} has {len(values)} values but {len(header)} headers expected"
            logger.warning(message)
            if debug is not None:
                debug(message)
            continue
        kept.append(QueryResultRow(pairs=tuple(zip(header, values))))

    if truncated:
        logger.info(f"Result truncated from {len(rows)} to {max_rows} rows")
    return ResultSet(header=header, rows=kept, truncated=truncated)


def truncation_message(max_rows: int = MAX_RESULT_ROWS) -> str:
    return TRUNCATION_MESSAGE.format(max_rows=max_rows)


@dataclass
class ResultWindow:
    """
    Selection and scroll state over a ResultSet.

    Invariants after every method:
        0 <= selected_row <= max(0, total_rows - 1)
        0 <= row_scroll <= max(0, total_rows - visible_rows)
        0 <= column_scroll <= max(0, total_columns - visible_columns)
    """
    selected_row: int = 0
    row_scroll: int = 0
    column_scroll: int = 0
    visible_rows: int = 20
    visible_columns: int = MAX_VISIBLE_COLUMNS

    def reset(self) -> None:
        self.selected_row = 0
        self.row_scroll = 0
        self.column_scroll = 0

    def clamp(self, total_rows: int, total_columns: int) -> None:
        self.visible_rows = max(1, self.visible_rows)
        self.selected_row = max(0, min(self.selected_row, max(0, total_rows - 1)))
        self.row_scroll = max(0, min(self.row_scroll, max(0, total_rows - self.visible_rows)))
        self.column_scroll = max(0, min(self.column_scroll, max(0, total_columns - self.visible_columns)))

    def _follow_selection(self) -> None:
        if self.selected_row < self.row_scroll:
            self.row_scroll = self.selected_row
        elif self.selected_row >= self.row_scroll + self.visible_rows:
            self.row_scroll = self.selected_row - self.visible_rows + 1

    def move_up(self, result: ResultSet) -> None:
        if self.selected_row > 0:
            self.selected_row -= 1
        self._follow_selection()
        self.clamp(result.total_rows, result.total_columns)

    def move_down(self, result: ResultSet) -> None:
        if self.selected_row < result.total_rows - 1:
            self.selected_row += 1
        self._follow_selection()
        self.clamp(result.total_rows, result.total_columns)

    def page_up(self, result: ResultSet) -> None:
        self.selected_row = max(0, self.selected_row - PAGE_SIZE)
        self.row_scroll = self.selected_row
        self.clamp(result.total_rows, result.total_columns)

    def page_down(self, result: ResultSet) -> None:
        self.selected_row = min(max(0, result.total_rows - 1), self.selected_row + PAGE_SIZE)
        self._follow_selection()
        self.clamp(result.total_rows, result.total_columns)

    def home(self, result: ResultSet) -> None:
        self.reset()
        self.clamp(result.total_rows, result.total_columns)

    def end(self, result: ResultSet) -> None:
        self.selected_row = max(0, result.total_rows - 1)
        self.row_scroll = max(0, result.total_rows - self.visible_rows)
        self.clamp(result.total_rows, result.total_columns)

    def scroll_left(self, result: ResultSet) -> None:
        self.column_scroll -= 1
        self.clamp(result.total_rows, result.total_columns)

    def scroll_right(self, result: ResultSet) -> None:
        self.column_scroll += 1
        self.clamp(result.total_rows, result.total_columns)


@dataclass
class VisibleSlice:
    """What the result table draws: one row number per row, then cells."""
    header: List[str]
    rows: List[Tuple[int, List[str]]]
    first_column: int
    last_column: int


def visible_slice(result: ResultSet, window: ResultWindow) -> VisibleSlice:
    """
    Cut the viewport out of a result set.

    Returns:
        VisibleSlice with 1-based row numbers and display-cleaned cells
    """
    window.clamp(result.total_rows, result.total_columns)
    start_col = window.column_scroll
    end_col = min(start_col + window.visible_columns, result.total_columns)
    end_row = min(window.row_scroll + window.visible_rows, result.total_rows)

    rows = []
    for index in range(window.row_scroll, end_row):
        values = result.rows[index].values()[start_col:end_col]
        rows.append((index + 1, [display_cell(value) for value in values]))

    return VisibleSlice(
        header=result.header[start_col:end_col],
        rows=rows,
        first_column=start_col,
        last_column=end_col,
    )


def sanitize_cell(value: str) -> str:
    """Strip control characters other than tab and newline."""
    return "".join(
        ch for ch in value
        if ch in "\t\n" or unicodedata.category(ch) != "Cc"
    )


def display_cell(value: str) -> str:
    """Cleaned cell text, truncated to 97 characters plus '...' past 100."""
    cleaned = sanitize_cell(value)
    if len(cleaned) > MAX_CELL_WIDTH:
        return cleaned[:TRUNCATED_CELL_WIDTH] + "..."
    return cleaned


def clipboard_text(result: ResultSet, rows: Sequence[QueryResultRow]) -> str:
    """
    Tab-separated header line plus one line per row, untruncated.

    Example:
        >>> result = ingest_result(["id", "name"], [["1", "Alice"]])
        >>> clipboard_text(result, result.rows)
        'id\\tname\\n1\\tAlice\\n'
    """
    lines = ["\t".join(result.header)]
    for row in rows:
        # Positional: a header may repeat a column name (SELECT u.id, o.id)
        lines.append("\t".join(row.values()))
    return "\n".join(lines) + "\n"
