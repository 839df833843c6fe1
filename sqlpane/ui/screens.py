"""
Render routines - one per screen or pane.

Each routine reads the session and returns a Rich renderable; the Textual
shell places it into the matching pane. Nothing here mutates the session
apart from clamping the result window to the pane size.
"""
from typing import List

from rich.console import Group, RenderableType
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from sqlpane.core.exceptions import UnsupportedOperationError
from sqlpane.ui.results import visible_slice
from sqlpane.ui.state import (
    DATABASES_VISIBLE,
    DatabaseClientUI,
    DatabaseType,
    FocusedWidget,
    InputField,
)

SELECTED_STYLE = "bold black on yellow"
FOCUSED_BORDER = "yellow"
BORDER = "white"
KEY_STYLE = "bold yellow"


def help_line(*pairs) -> Text:
    """Build 'Key action, Key action' help text with highlighted keys."""
    text = Text(justify="center")
    for index, (keys, action) in enumerate(pairs):
        if index:
            text.append(", ")
        text.append(keys, style=KEY_STYLE)
        text.append(f" {action}")
    return text


# ============== Dialog screens ==============

def render_message_popup(session: DatabaseClientUI) -> RenderableType:
    message = UnsupportedOperationError(session.db_type.label).message
    body = Text(justify="center")
    body.append(message + "\n\n")
    body.append("Press any key to return.", style="dim")
    return Panel(body, title="Message", border_style="red")


def render_db_type_selection(session: DatabaseClientUI) -> RenderableType:
    lines = Text()
    for db_type in DatabaseType:
        style = SELECTED_STYLE if db_type == session.selected_db_type else ""
        lines.append(f" {db_type.label} ", style=style)
        lines.append("\n")
    return Panel(lines, title="Select Database Type", border_style=FOCUSED_BORDER)


def db_type_help() -> Text:
    return help_line(("Up/Down", "to navigate"), ("Enter", "to select"), ("q", "to quit"))


def render_connection_input(session: DatabaseClientUI) -> RenderableType:
    form = session.connection_input
    body = Text()
    for input_field in InputField:
        value = form.value(input_field)
        if input_field is InputField.PASSWORD:
            value = "*" * len(value)
        line = f"{input_field.value}: {value}"
        if input_field is form.current_field:
            body.append(line + " <", style="bold yellow")
        else:
            body.append(line)
        body.append("\n")

    title = f"Enter Connection Details ({session.db_type.label})"
    panel = Panel(body, title=title, border_style=FOCUSED_BORDER)
    if session.connection_error_message is None:
        return panel
    error = Panel(
        Text(session.connection_error_message, style="red"),
        title="Error",
        subtitle="Enter/Esc to dismiss",
        border_style="red",
    )
    return Group(panel, error)


def connection_input_help() -> Text:
    return help_line(
        ("Enter", "to confirm input"),
        ("Up/Down", "to navigate fields"),
        ("Esc", "to go back"),
    )


def render_database_selection(session: DatabaseClientUI) -> RenderableType:
    body = Text()
    if session.database_list_error:
        body.append(session.database_list_error + "\n", style="red")
    window = session.databases[session.databases_scroll:session.databases_scroll + DATABASES_VISIBLE]
    for offset, name in enumerate(window):
        index = session.databases_scroll + offset
        body.append(name, style=SELECTED_STYLE if index == session.selected_database else "")
        body.append("\n")

    total = len(session.databases)
    position = session.selected_database + 1 if total else 0
    return Panel(body, title=f"Select Database ({position}/{total})", border_style=FOCUSED_BORDER)


def database_selection_help() -> Text:
    return help_line(("Up/Down", "to navigate"), ("Enter", "to select"), ("q", "to quit"))


# ============== Table view ==============

def _border(session: DatabaseClientUI, widget: FocusedWidget) -> str:
    return FOCUSED_BORDER if session.current_focus is widget else BORDER


def render_tables_list(session: DatabaseClientUI, height: int = 50) -> RenderableType:
    lines: List[Text] = []
    if session.tables_error:
        lines.append(Text(session.tables_error, style="red"))

    for index in range(session.tables_scroll, len(session.tables)):
        if len(lines) >= height:
            break
        name = session.tables[index]
        lines.append(Text(name, style=SELECTED_STYLE if index == session.selected_table else ""))
        schema = session.table_schemas.get(name)
        if session.expanded_table == index and schema is not None:
            for column in schema.columns:
                lines.append(Text(
                    f"  ├─ {column.name}: {column.data_type} "
                    f"(Nullable: {column.is_nullable}, Default: {column.default})",
                    style="grey62",
                ))

    total = len(session.tables)
    position = session.selected_table + 1 if total else 0
    return Panel(
        Group(*lines) if lines else Text(""),
        title=f"Tables ({position}/{total})",
        border_style=_border(session, FocusedWidget.TABLES_LIST),
    )


def render_editor(session: DatabaseClientUI) -> RenderableType:
    editor = session.editor
    focused = session.current_focus is FocusedWidget.SQL_EDITOR
    body = Text()
    last = min(len(editor.lines), editor.scroll + session.editor_viewport)
    for y in range(editor.scroll, last):
        line = editor.lines[y]
        if focused and y == editor.cursor_y:
            x = editor.cursor_x
            body.append(line[:x])
            body.append(line[x:x + 1] or " ", style="reverse")
            body.append(line[x + 1:])
        else:
            body.append(line)
        if y < last - 1:
            body.append("\n")
    return Panel(body, title="SQL Query", border_style=_border(session, FocusedWidget.SQL_EDITOR))


def _result_title(session: DatabaseClientUI) -> str:
    result, window = session.result, session.window
    total_rows, total_columns = result.total_rows, result.total_columns
    if total_rows <= window.visible_rows and total_columns <= window.visible_columns:
        return f"Query Result ({total_rows} rows)"

    if total_rows > window.visible_rows:
        last_visible = min(window.row_scroll + window.visible_rows, total_rows)
        row_info = f"Rows {last_visible}/{total_rows} - "
    else:
        row_info = f"{total_rows} rows - "
    column_info = ""
    if total_columns > window.visible_columns:
        last_column = min(window.column_scroll + window.visible_columns, total_columns)
        column_info = f" | Cols {window.column_scroll + 1}-{last_column}/{total_columns}"
    selected = min(window.selected_row + 1, total_rows)
    return f"Query Result ({row_info}Row {selected}/{total_rows}{column_info})"


def render_results(session: DatabaseClientUI) -> RenderableType:
    border = _border(session, FocusedWidget.QUERY_RESULT)

    if session.show_debug:
        table = Table(expand=True, header_style="bold cyan")
        table.add_column("#", width=4)
        table.add_column("Debug Info")
        for number, message in enumerate(session.debug_info, start=1):
            table.add_row(str(number), message)
        return Panel(
            table,
            title=f"Debug info ({len(session.debug_info)} messages) - Press F12 again to close",
            border_style=border,
        )

    if session.sql_query_error is not None:
        return Panel(Text(session.sql_query_error, style="red"), title="Query Result", border_style=border)

    if session.result.is_empty():
        message = session.sql_query_success_message or "No results"
        return Panel(Text(message, style="green"), title="Query Result", border_style=border)

    view = visible_slice(session.result, session.window)
    focused = session.current_focus is FocusedWidget.QUERY_RESULT
    table = Table(header_style="bold cyan", show_lines=False)
    table.add_column("#", justify="right", min_width=4)
    for header in view.header:
        table.add_column(header, min_width=8, max_width=40, no_wrap=True, overflow="ellipsis")
    for number, cells in view.rows:
        selected = focused and number - 1 == session.window.selected_row
        table.add_row(str(number), *cells, style=SELECTED_STYLE if selected else None)

    parts = [table]
    if session.sql_query_success_message:
        parts.append(Text(session.sql_query_success_message, style="green"))
    return Panel(Group(*parts), title=_result_title(session), border_style=border)


def table_view_help() -> Text:
    return help_line(
        ("Tab", "- navigate"),
        ("F5/Ctrl+E", "- execute"),
        ("y", "- copy row"),
        ("Y", "- copy all"),
        ("F12", "- debug"),
        ("F1", "- databases"),
        ("Esc", "- quit"),
    )
