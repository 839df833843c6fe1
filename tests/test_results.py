"""
Tests for result ingestion, viewport windowing and cell display.
"""

import pytest

from sqlpane.ui.results import (
    ResultWindow,
    clipboard_text,
    display_cell,
    ingest_result,
    sanitize_cell,
    truncation_message,
    visible_slice,
)


def make_result(rows: int, columns: int = 3):
    header = [f"c{n}" for n in range(columns)]
    data = [[f"r{r}c{c}" for c in range(columns)] for r in range(rows)]
    return ingest_result(header, data)


class TestIngest:
    """Building a ResultSet from a query's output."""

    def test_rows_keep_header_order(self):
        """Row pairs follow the header, not sorted keys."""
        result = ingest_result(["name", "email"], [["Alice", "a@x.io"]])
        assert result.header == ["name", "email"]
        assert result.rows[0].keys() == ["name", "email"]
        assert result.rows[0].get("email") == "a@x.io"

    def test_row_cap(self):
        """1500 rows are cut to the first 1000 and flagged."""
        result = make_result(1500)
        assert result.total_rows == 1000
        assert result.truncated
        assert result.rows[-1].get("c0") == "r999c0"
        assert truncation_message() == "Results limited to 1000 rows for performance"

    def test_exactly_cap_is_not_truncated(self):
        """The flag is only set when rows were actually dropped."""
        assert not make_result(1000).truncated

    def test_mismatched_rows_dropped(self):
        """Rows whose width differs from the header are skipped with a message."""
        messages = []
        result = ingest_result(
            ["id", "name"],
            [["1", "a"], ["2"], ["3", "c", "extra"], ["4", "d"]],
            debug=messages.append,
        )
        assert [row.get("id") for row in result.rows] == ["1", "4"]
        assert messages == [
            "Row 1 has 1 values but 2 headers expected",
            "Row 2 has 3 values but 2 headers expected",
        ]

    def test_header_without_rows(self):
        """An empty SELECT keeps its header."""
        result = ingest_result(["id"], [])
        assert result.is_empty()
        assert result.total_columns == 1


class TestResultWindow:
    """Selection and scroll offsets."""

    def test_move_down_stops_at_last_row(self):
        """The selection never passes the final row."""
        result = make_result(3)
        window = ResultWindow(visible_rows=2)
        for _ in range(10):
            window.move_down(result)
        assert window.selected_row == 2
        assert window.row_scroll == 1

    def test_move_up_stops_at_zero(self):
        """The selection never goes negative."""
        result = make_result(3)
        window = ResultWindow()
        window.move_up(result)
        assert window.selected_row == 0

    def test_page_down_and_up(self):
        """Page keys move ten rows at a time."""
        result = make_result(50)
        window = ResultWindow(visible_rows=5)
        window.page_down(result)
        assert window.selected_row == 10
        assert window.row_scroll == 6
        window.page_up(result)
        assert window.selected_row == 0
        assert window.row_scroll == 0

    def test_home_and_end(self):
        """End jumps to the last row, home back to the first."""
        result = make_result(50)
        window = ResultWindow(visible_rows=20)
        window.end(result)
        assert window.selected_row == 49
        assert window.row_scroll == 30
        window.home(result)
        assert (window.selected_row, window.row_scroll, window.column_scroll) == (0, 0, 0)

    def test_column_scroll_bounds(self):
        """Horizontal scroll stops when the last column is visible."""
        result = make_result(2, columns=11)
        window = ResultWindow()
        for _ in range(10):
            window.scroll_right(result)
        assert window.column_scroll == 3
        for _ in range(10):
            window.scroll_left(result)
        assert window.column_scroll == 0

    def test_narrow_result_does_not_scroll(self):
        """Results with at most eight columns never scroll sideways."""
        result = make_result(2, columns=8)
        window = ResultWindow()
        window.scroll_right(result)
        assert window.column_scroll == 0

    def test_empty_result_is_stable(self):
        """Moves on an empty result leave everything at zero."""
        result = make_result(0)
        window = ResultWindow()
        for move in (window.move_down, window.page_down, window.end, window.scroll_right):
            move(result)
        assert (window.selected_row, window.row_scroll, window.column_scroll) == (0, 0, 0)

    def test_shrinking_viewport_reclamps(self):
        """clamp() repairs offsets when the result gets shorter."""
        window = ResultWindow(selected_row=40, row_scroll=30, column_scroll=5)
        window.clamp(total_rows=10, total_columns=4)
        assert (window.selected_row, window.row_scroll, window.column_scroll) == (9, 0, 0)


class TestVisibleSlice:
    """The cells drawn for the current viewport."""

    def test_slice_has_row_numbers_and_columns(self):
        """Rows are numbered from 1 and columns start at the scroll offset."""
        result = make_result(30, columns=10)
        window = ResultWindow(row_scroll=5, column_scroll=2, visible_rows=3)
        view = visible_slice(result, window)
        assert view.header == [f"c{n}" for n in range(2, 10)]
        assert [number for number, _ in view.rows] == [6, 7, 8]
        assert view.rows[0][1][0] == "r5c2"
        assert (view.first_column, view.last_column) == (2, 10)

    def test_long_cells_are_truncated(self):
        """Cells over 100 characters show 97 plus an ellipsis."""
        long_value = "x" * 150
        result = ingest_result(["body"], [[long_value]])
        view = visible_slice(result, ResultWindow())
        cell = view.rows[0][1][0]
        assert cell == "x" * 97 + "..."
        assert len(cell) == 100


class TestCells:
    """Cell cleanup and clipboard text."""

    def test_exactly_100_characters_untouched(self):
        """The limit is inclusive."""
        assert display_cell("y" * 100) == "y" * 100

    @pytest.mark.parametrize("raw,expected", [
        ("a\x00b", "ab"),
        ("bell\x07", "bell"),
        ("tab\there", "tab\there"),
        ("line\nbreak", "line\nbreak"),
        ("esc\x1b[31m", "esc[31m"),
    ])
    def test_control_characters_removed(self, raw, expected):
        """Only tab and newline survive among control characters."""
        assert sanitize_cell(raw) == expected

    def test_clipboard_text_single_row(self):
        """Header line then the row, tab separated, newline terminated."""
        result = ingest_result(["id", "name"], [["1", "Alice"], ["2", "Bob"]])
        assert clipboard_text(result, [result.rows[1]]) == "id\tname\n2\tBob\n"

    def test_clipboard_text_is_untruncated(self):
        """Copied cells keep their full length."""
        long_value = "z" * 300
        result = ingest_result(["body"], [[long_value]])
        assert clipboard_text(result, result.rows) == f"body\n{long_value}\n"

    def test_clipboard_text_keeps_duplicate_column_names(self):
        """Joined tables selecting two 'id' columns copy both values."""
        result = ingest_result(["id", "id"], [["1", "2"]])
        assert clipboard_text(result, result.rows) == "id\tid\n1\t2\n"
