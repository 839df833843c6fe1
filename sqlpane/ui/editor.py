"""
Multi-line SQL editor buffer.

The buffer is a list of lines plus an (x, y) cursor. After every mutation
the cursor is clamped to [0, len(line)] x [0, line_count - 1], so rendering
and editing never index outside the text.
"""
from typing import List


class SqlEditor:
    """
    Line buffer with a cursor.

    Example:
        >>> editor = SqlEditor()
        >>> for ch in "SELECT 1":
        ...     editor.insert_char(ch)
        >>> editor.text
        'SELECT 1'
        >>> editor.cursor_x
        8
    """

    def __init__(self, text: str = ""):
        self.lines: List[str] = text.split("\n") if text else [""]
        self.cursor_x = 0
        self.cursor_y = 0
        self.scroll = 0

    @property
    def text(self) -> str:
        return "\n".join(self.lines)

    @property
    def current_line(self) -> str:
        return self.lines[self.cursor_y]

    def is_blank(self) -> bool:
        return not self.text.strip()

    def clear(self) -> None:
        self.lines = [""]
        self.cursor_x = 0
        self.cursor_y = 0
        self.scroll = 0

    def clamp_cursor(self) -> None:
        if not self.lines:
            self.lines = [""]
        self.cursor_y = max(0, min(self.cursor_y, len(self.lines) - 1))
        self.cursor_x = max(0, min(self.cursor_x, len(self.lines[self.cursor_y])))

    # ============== Editing ==============

    def insert_char(self, char: str) -> None:
        if char == "\n":
            self.insert_newline()
            return
        line = self.current_line
        self.lines[self.cursor_y] = line[:self.cursor_x] + char + line[self.cursor_x:]
        self.cursor_x += len(char)
        self.clamp_cursor()

    def insert_newline(self) -> None:
        line = self.current_line
        self.lines[self.cursor_y] = line[:self.cursor_x]
        self.lines.insert(self.cursor_y + 1, line[self.cursor_x:])
        self.cursor_y += 1
        self.cursor_x = 0
        self.clamp_cursor()

    def backspace(self) -> None:
        """Delete the character before the cursor, joining lines at column 0."""
        if self.cursor_x > 0:
            line = self.current_line
            self.lines[self.cursor_y] = line[:self.cursor_x - 1] + line[self.cursor_x:]
            self.cursor_x -= 1
        elif self.cursor_y > 0:
            previous = self.lines[self.cursor_y - 1]
            self.lines[self.cursor_y - 1] = previous + self.lines.pop(self.cursor_y)
            self.cursor_y -= 1
            self.cursor_x = len(previous)
        self.clamp_cursor()

    def delete(self) -> None:
        """Delete the character under the cursor, joining the next line at line end."""
        line = self.current_line
        if self.cursor_x < len(line):
            self.lines[self.cursor_y] = line[:self.cursor_x] + line[self.cursor_x + 1:]
        elif self.cursor_y < len(self.lines) - 1:
            self.lines[self.cursor_y] = line + self.lines.pop(self.cursor_y + 1)
        self.clamp_cursor()

    # ============== Movement ==============

    def move_left(self) -> None:
        if self.cursor_x > 0:
            self.cursor_x -= 1
        elif self.cursor_y > 0:
            self.cursor_y -= 1
            self.cursor_x = len(self.current_line)
        self.clamp_cursor()

    def move_right(self) -> None:
        if self.cursor_x < len(self.current_line):
            self.cursor_x += 1
        elif self.cursor_y < len(self.lines) - 1:
            self.cursor_y += 1
            self.cursor_x = 0
        self.clamp_cursor()

    def move_up(self) -> None:
        if self.cursor_y > 0:
            self.cursor_y -= 1
        self.clamp_cursor()

    def move_down(self) -> None:
        if self.cursor_y < len(self.lines) - 1:
            self.cursor_y += 1
        self.clamp_cursor()

    def move_home(self) -> None:
        self.cursor_x = 0

    def move_end(self) -> None:
        self.cursor_x = len(self.current_line)

    def ensure_visible(self, height: int) -> None:
        """Adjust scroll so the cursor line is inside a viewport of height lines."""
        height = max(1, height)
        if self.cursor_y < self.scroll:
            self.scroll = self.cursor_y
        elif self.cursor_y >= self.scroll + height:
            self.scroll = self.cursor_y - height + 1
        self.scroll = max(0, min(self.scroll, max(0, len(self.lines) - 1)))
