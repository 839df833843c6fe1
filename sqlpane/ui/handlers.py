"""
Input handlers - one per screen.

A key press is routed to the handler of the current screen and awaited to
completion before the next key is read, so handlers may freely await
database operations. Every DbError is turned into a message on the
session; none of them ends the event loop.

Before rendering, prepare_screen() performs the lazy refreshes gated by
the session's dirty flags (needs_db_refresh / needs_tables_refresh).
"""
import asyncio
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Dict, Optional, Protocol

from sqlpane.core.exceptions import DbError
from sqlpane.core.logging_config import LoggerMixin, get_logger
from sqlpane.database.schema import TableSchema
from sqlpane.ui.backends import ADAPTERS, adapter_for
from sqlpane.ui.machine import Screen, Trigger
from sqlpane.ui.results import clipboard_text, ingest_result, truncation_message
from sqlpane.ui.state import DatabaseClientUI, DatabaseType, FocusedWidget, InputField

logger = get_logger(__name__)


@dataclass(frozen=True)
class KeyPress:
    """
    A key event, decoupled from the terminal library.

    key uses Textual's names ("up", "enter", "f5", "ctrl+e", "a");
    character is the printable text the key produced, if any.
    """
    key: str
    character: Optional[str] = None

    @property
    def text(self) -> Optional[str]:
        if self.character and len(self.character) == 1 and self.character.isprintable():
            return self.character
        return None


class Clipboard(Protocol):
    def copy(self, text: str) -> None:
        ...


class ScreenHandler(ABC, LoggerMixin):
    """Base class for per-screen input handling."""

    @abstractmethod
    async def handle(self, session: DatabaseClientUI, key: KeyPress) -> None:
        ...


class MessagePopupHandler(ScreenHandler):
    async def handle(self, session: DatabaseClientUI, key: KeyPress) -> None:
        session.transition(Trigger.DISMISS)


class DbTypeSelectionHandler(ScreenHandler):
    async def handle(self, session: DatabaseClientUI, key: KeyPress) -> None:
        if key.key == "up":
            session.selected_db_type = max(0, session.selected_db_type - 1)
        elif key.key == "down":
            session.selected_db_type = min(len(DatabaseType) - 1, session.selected_db_type + 1)
        elif key.key == "enter":
            if session.db_type in ADAPTERS:
                session.connection_error_message = None
                session.transition(Trigger.SELECT_SERVER_TYPE)
            else:
                session.transition(Trigger.SELECT_UNSUPPORTED_TYPE)
        elif key.text == "q":
            session.should_exit = True


class ConnectionInputHandler(ScreenHandler):
    """Connection form: edit fields, Enter on Port connects."""

    async def handle(self, session: DatabaseClientUI, key: KeyPress) -> None:
        form = session.connection_input

        # An error message is modal until dismissed
        if session.connection_error_message is not None:
            if key.key in ("enter", "escape"):
                session.connection_error_message = None
            return

        if key.key == "escape":
            session.transition(Trigger.BACK)
        elif key.key == "up":
            form.previous_field()
        elif key.key == "down":
            form.next_field()
        elif key.key == "backspace":
            form.backspace()
        elif key.key == "enter":
            if form.current_field is InputField.PORT:
                await self.connect(session)
            else:
                form.next_field()
        elif key.text is not None:
            form.append_char(key.text)

    async def connect(self, session: DatabaseClientUI) -> None:
        try:
            await adapter_for(session).connect_to_default_db()
        except DbError as e:
            self.logger.warning(f"Connection failed: {e}")
            session.connection_error_message = f"Connection failed: {e}"
            session.add_debug_info(f"Connection failed: {e}")
            return

        session.databases = []
        session.selected_database = 0
        session.databases_scroll = 0
        session.database_list_error = None
        session.needs_db_refresh = True
        session.transition(Trigger.CONNECTED)


class DatabaseSelectionHandler(ScreenHandler):
    async def handle(self, session: DatabaseClientUI, key: KeyPress) -> None:
        if key.key == "up":
            session.move_database_up()
        elif key.key == "down":
            session.move_database_down()
        elif key.key == "enter":
            await self.open_selected(session)
        elif key.text == "q":
            session.should_exit = True

    async def open_selected(self, session: DatabaseClientUI) -> None:
        if not session.databases or session.selected_database >= len(session.databases):
            return
        database = session.databases[session.selected_database]
        try:
            await adapter_for(session).connect_to_selected_db(database)
        except DbError as e:
            self.logger.error(f"Error connecting to database {database}: {e}")
            session.database_list_error = f"Error connecting to database: {e}"
            return

        session.database_list_error = None
        session.forget_database()
        session.needs_tables_refresh = True
        session.current_focus = FocusedWidget.TABLES_LIST
        session.add_debug_info(f"Opened database {database}")
        session.transition(Trigger.DATABASE_OPENED)


class TableViewHandler(ScreenHandler):
    """
    Table view: tables list, SQL editor and query result.

    Global keys: Tab (focus), F1 (back), Esc (quit), F5/Ctrl+E (execute),
    F12 (debug view). Other keys go to the focused widget.
    """

    def __init__(self, clipboard: Clipboard):
        self.clipboard = clipboard

    async def handle(self, session: DatabaseClientUI, key: KeyPress) -> None:
        if key.key == "tab":
            session.cycle_focus()
        elif key.key == "f1":
            session.reset_workspace()
            session.transition(Trigger.BACK)
        elif key.key == "escape":
            session.should_exit = True
        elif key.key in ("f5", "ctrl+e"):
            await self.execute_editor(session)
        elif key.key == "f12":
            session.show_debug = not session.show_debug
        elif session.current_focus is FocusedWidget.TABLES_LIST:
            await self.handle_tables_list(session, key)
        elif session.current_focus is FocusedWidget.SQL_EDITOR:
            self.handle_editor(session, key)
        else:
            self.handle_result(session, key)

    # ============== Tables list ==============

    async def handle_tables_list(self, session: DatabaseClientUI, key: KeyPress) -> None:
        if key.key == "up":
            session.move_selection_up()
        elif key.key == "down":
            session.move_selection_down()
        elif key.key == "enter":
            await self.toggle_table(session)

    async def toggle_table(self, session: DatabaseClientUI) -> None:
        if not session.tables:
            session.add_debug_info("No tables available.")
            return
        index = session.selected_table
        if session.expanded_table == index:
            session.expanded_table = None
            return

        table_name = session.tables[index]
        if table_name not in session.table_schemas:
            try:
                columns = await adapter_for(session).describe_table(table_name)
            except DbError as e:
                self.logger.error(f"Error describing table {table_name}: {e}")
                session.add_debug_info(f"Error describing table {table_name}: {e}")
                return
            session.table_schemas[table_name] = TableSchema.from_column_names(table_name, columns)
        session.expanded_table = index

    # ============== SQL editor ==============

    def handle_editor(self, session: DatabaseClientUI, key: KeyPress) -> None:
        editor = session.editor
        actions = {
            "enter": editor.insert_newline,
            "backspace": editor.backspace,
            "delete": editor.delete,
            "left": editor.move_left,
            "right": editor.move_right,
            "up": editor.move_up,
            "down": editor.move_down,
            "home": editor.move_home,
            "end": editor.move_end,
        }
        action = actions.get(key.key)
        if action is not None:
            action()
        elif key.text is not None:
            editor.insert_char(key.text)
        editor.ensure_visible(session.editor_viewport)

    async def execute_editor(self, session: DatabaseClientUI) -> None:
        if session.editor.is_blank():
            return
        sql = session.editor.text
        session.sql_query_error = None
        session.show_debug = False
        session.add_debug_info(f"Executing: {sql.strip()[:100]}")

        try:
            header, rows, message = await adapter_for(session).execute_sql_query(sql)
        except DbError as e:
            self.logger.error(f"Query failed: {e}")
            session.sql_query_error = f"SQL Error: {e}"
            session.sql_query_success_message = None
            session.clear_result()
            return

        max_rows = session.settings.max_result_rows
        session.result = ingest_result(header, rows, max_rows=max_rows, debug=session.add_debug_info)
        session.window.reset()
        session.sql_query_success_message = truncation_message(max_rows) if session.result.truncated else message
        session.needs_tables_refresh = True
        session.add_debug_info(f"Processed {session.result.total_rows} rows successfully")

    # ============== Query result ==============

    def handle_result(self, session: DatabaseClientUI, key: KeyPress) -> None:
        result, window = session.result, session.window
        moves = {
            "up": window.move_up,
            "down": window.move_down,
            "pageup": window.page_up,
            "pagedown": window.page_down,
            "home": window.home,
            "end": window.end,
            "left": window.scroll_left,
            "right": window.scroll_right,
        }
        move = moves.get(key.key)
        if move is not None:
            move(result)
        elif key.text == "y":
            self.copy(session, all_rows=False)
        elif key.text == "Y":
            self.copy(session, all_rows=True)

    def copy(self, session: DatabaseClientUI, all_rows: bool) -> None:
        result = session.result
        if result.is_empty():
            return
        rows = result.rows if all_rows else [result.rows[session.window.selected_row]]
        self.clipboard.copy(clipboard_text(result, rows))
        session.sql_query_success_message = f"Copied {len(rows)} row(s) to clipboard"
        self.logger.debug(f"Copied {len(rows)} rows")


class KeyDispatcher:
    """
    Routes key presses to the current screen's handler.

    Example:
        >>> dispatcher = KeyDispatcher(clipboard)
        >>> await dispatcher.dispatch(session, KeyPress("down"))
        >>> await prepare_screen(session)
    """

    def __init__(self, clipboard: Clipboard):
        self.handlers: Dict[Screen, ScreenHandler] = {
            Screen.MESSAGE_POPUP: MessagePopupHandler(),
            Screen.DB_TYPE_SELECTION: DbTypeSelectionHandler(),
            Screen.CONNECTION_INPUT: ConnectionInputHandler(),
            Screen.DATABASE_SELECTION: DatabaseSelectionHandler(),
            Screen.TABLE_VIEW: TableViewHandler(clipboard),
        }

    async def dispatch(self, session: DatabaseClientUI, key: KeyPress) -> None:
        await self.handlers[session.current_screen].handle(session, key)


# ============== Lazy refresh ==============

async def refresh_databases(session: DatabaseClientUI) -> None:
    """
    Fetch the database list if it is marked dirty.

    The fetch is cancelled when the refresh timeout expires; on timeout or
    error the list is emptied, an error line is set and the flag stays set.
    """
    if not session.needs_db_refresh:
        return
    timeout = session.settings.refresh_timeout_seconds
    try:
        databases = await asyncio.wait_for(adapter_for(session).fetch_databases(), timeout)
    except asyncio.TimeoutError:
        logger.warning(f"Timeout while fetching databases ({timeout}s)")
        session.databases = []
        session.database_list_error = "Timeout while fetching databases"
        session.add_debug_info("Timeout while fetching databases")
        return
    except DbError as e:
        logger.error(f"Error fetching databases: {e}")
        session.databases = []
        session.database_list_error = f"Error fetching databases: {e}"
        session.add_debug_info(f"Error fetching databases: {e}")
        return

    session.set_databases(databases)
    session.database_list_error = None
    session.needs_db_refresh = False


async def refresh_tables(session: DatabaseClientUI) -> None:
    """Fetch the table list if it is marked dirty; same policy as databases."""
    if not session.needs_tables_refresh:
        return
    timeout = session.settings.refresh_timeout_seconds
    try:
        tables = await asyncio.wait_for(adapter_for(session).fetch_tables(), timeout)
    except asyncio.TimeoutError:
        logger.warning(f"Timeout while fetching tables ({timeout}s)")
        session.tables = []
        session.expanded_table = None
        session.tables_error = "Timeout while fetching tables"
        session.add_debug_info("Timeout while fetching tables")
        return
    except DbError as e:
        logger.error(f"Error fetching tables: {e}")
        session.tables = []
        session.expanded_table = None
        session.tables_error = f"Error fetching tables: {e}"
        session.add_debug_info(f"Error fetching tables: {e}")
        return

    session.set_tables(tables)
    session.tables_error = None
    session.needs_tables_refresh = False


async def prepare_screen(session: DatabaseClientUI) -> None:
    """Run the lazy refresh the current screen needs before it is drawn."""
    if session.current_screen is Screen.DATABASE_SELECTION:
        await refresh_databases(session)
    elif session.current_screen is Screen.TABLE_VIEW:
        await refresh_tables(session)
