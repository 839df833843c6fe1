"""
Session state of the interactive client.

DatabaseClientUI is the single mutable aggregate the event loop owns:
the current screen, the connection form, cached database/table lists, the
SQL editor, the last query result and the debug ring buffer. Handlers
mutate it; render routines only read it.
"""
import time
from collections import deque
from dataclasses import dataclass, field
from enum import Enum, IntEnum
from typing import Deque, Dict, List, Optional

from sqlpane.core.config import Settings, get_settings
from sqlpane.core.logging_config import get_logger
from sqlpane.database.connection_manager import ConnectionRegistry
from sqlpane.database.schema import TableSchema
from sqlpane.ui.editor import SqlEditor
from sqlpane.ui.machine import Screen, Trigger, next_screen
from sqlpane.ui.results import ResultSet, ResultWindow

logger = get_logger(__name__)

DATABASES_VISIBLE = 20
TABLES_VISIBLE = 50


class FocusedWidget(Enum):
    """Focus inside the table view; Tab cycles in declaration order."""
    TABLES_LIST = "tables_list"
    SQL_EDITOR = "sql_editor"
    QUERY_RESULT = "query_result"


class InputField(Enum):
    USERNAME = "Username"
    PASSWORD = "Password"
    HOSTNAME = "Hostname"
    PORT = "Port"


class DatabaseType(IntEnum):
    POSTGRES = 0
    MYSQL = 1
    SQLITE = 2

    @property
    def label(self) -> str:
        return {
            DatabaseType.POSTGRES: "PostgreSQL",
            DatabaseType.MYSQL: "MySQL",
            DatabaseType.SQLITE: "SQLite",
        }[self]


_FIELDS = list(InputField)
_FOCUS_ORDER = list(FocusedWidget)


@dataclass
class ConnectionInput:
    """Connection form; current_field receives typed characters."""
    username: str = ""
    password: str = ""
    hostname: str = ""
    port: str = ""
    current_field: InputField = InputField.USERNAME

    @classmethod
    def from_settings(cls, settings: Settings) -> "ConnectionInput":
        return cls(
            username=settings.default_username,
            password=settings.default_password,
            hostname=settings.default_hostname,
            port=settings.default_port,
        )

    def value(self, input_field: InputField) -> str:
        return getattr(self, input_field.name.lower())

    def _set(self, input_field: InputField, value: str) -> None:
        setattr(self, input_field.name.lower(), value)

    def append_char(self, char: str) -> None:
        self._set(self.current_field, self.value(self.current_field) + char)

    def backspace(self) -> None:
        self._set(self.current_field, self.value(self.current_field)[:-1])

    def next_field(self) -> None:
        index = _FIELDS.index(self.current_field)
        self.current_field = _FIELDS[min(index + 1, len(_FIELDS) - 1)]

    def previous_field(self) -> None:
        index = _FIELDS.index(self.current_field)
        self.current_field = _FIELDS[max(index - 1, 0)]


@dataclass
class DatabaseClientUI:
    """
    Everything the screens show and the handlers change.

    The registry is owned here and shared by reference with the backend
    adapters; it holds the only live database client.
    """
    registry: ConnectionRegistry
    settings: Settings
    connection_input: ConnectionInput = field(default_factory=ConnectionInput)
    current_screen: Screen = Screen.DB_TYPE_SELECTION
    selected_db_type: int = DatabaseType.POSTGRES

    # Database selection
    databases: List[str] = field(default_factory=list)
    selected_database: int = 0
    databases_scroll: int = 0
    database_list_error: Optional[str] = None

    # Table view
    tables: List[str] = field(default_factory=list)
    selected_table: int = 0
    tables_scroll: int = 0
    expanded_table: Optional[int] = None
    table_schemas: Dict[str, TableSchema] = field(default_factory=dict)
    tables_error: Optional[str] = None
    tables_viewport: int = TABLES_VISIBLE

    # Editor and results
    editor: SqlEditor = field(default_factory=SqlEditor)
    result: ResultSet = field(default_factory=ResultSet)
    window: ResultWindow = field(default_factory=ResultWindow)
    sql_query_error: Optional[str] = None
    sql_query_success_message: Optional[str] = None
    current_focus: FocusedWidget = FocusedWidget.TABLES_LIST
    editor_viewport: int = 10

    connection_error_message: Optional[str] = None
    needs_db_refresh: bool = False
    needs_tables_refresh: bool = False
    last_db_update: Optional[float] = None
    last_tables_update: Optional[float] = None

    debug_info: Deque[str] = field(default_factory=lambda: deque(maxlen=100))
    show_debug: bool = False
    should_exit: bool = False

    @classmethod
    def create(
        cls,
        settings: Optional[Settings] = None,
        registry: Optional[ConnectionRegistry] = None,
    ) -> "DatabaseClientUI":
        """
        Build a fresh session from settings.

        Args:
            settings: Defaults to get_settings()
            registry: Defaults to an empty registry sized by settings.pool_size
        """
        settings = settings or get_settings()
        return cls(
            registry=registry or ConnectionRegistry(pool_size=settings.pool_size),
            settings=settings,
            connection_input=ConnectionInput.from_settings(settings),
            debug_info=deque(maxlen=settings.debug_buffer_size),
        )

    @property
    def db_type(self) -> DatabaseType:
        return DatabaseType(self.selected_db_type)

    def transition(self, trigger: Trigger) -> None:
        """Move to the screen TRANSITIONS lists for (current_screen, trigger)."""
        target = next_screen(self.current_screen, trigger)
        logger.debug(f"Screen {self.current_screen.name} -> {target.name} on {trigger.name}")
        self.current_screen = target

    def cycle_focus(self) -> None:
        index = _FOCUS_ORDER.index(self.current_focus)
        self.current_focus = _FOCUS_ORDER[(index + 1) % len(_FOCUS_ORDER)]

    # ============== List selection ==============

    def move_database_up(self) -> None:
        if self.selected_database > 0:
            self.selected_database -= 1
            if self.selected_database < self.databases_scroll:
                self.databases_scroll = self.selected_database

    def move_database_down(self) -> None:
        if self.databases and self.selected_database < len(self.databases) - 1:
            self.selected_database += 1
            if self.selected_database >= self.databases_scroll + DATABASES_VISIBLE:
                self.databases_scroll = self.selected_database - DATABASES_VISIBLE + 1

    def move_selection_up(self) -> None:
        if self.selected_table > 0:
            self.selected_table -= 1
            if self.selected_table < self.tables_scroll:
                self.tables_scroll = self.selected_table

    def move_selection_down(self) -> None:
        if self.selected_table < len(self.tables) - 1:
            self.selected_table += 1
        self.keep_table_visible()

    def _tables_lines_through(self, index: int) -> int:
        lines = 1 if self.tables_error else 0
        for position in range(self.tables_scroll, index + 1):
            lines += 1
            if position < index and position == self.expanded_table:
                schema = self.table_schemas.get(self.tables[position])
                if schema is not None:
                    lines += len(schema.columns)
        return lines

    def keep_table_visible(self) -> None:
        """Scroll the table list until the selected row fits tables_viewport lines."""
        if self.selected_table < self.tables_scroll:
            self.tables_scroll = self.selected_table
        while (
            self.tables_scroll < self.selected_table
            and self._tables_lines_through(self.selected_table) > self.tables_viewport
        ):
            self.tables_scroll += 1

    def set_databases(self, databases: List[str]) -> None:
        self.databases = databases
        self.selected_database = min(self.selected_database, max(0, len(databases) - 1))
        self.databases_scroll = min(self.databases_scroll, self.selected_database)
        self.last_db_update = time.monotonic()

    def set_tables(self, tables: List[str]) -> None:
        self.tables = tables
        self.selected_table = min(self.selected_table, max(0, len(tables) - 1))
        self.tables_scroll = min(self.tables_scroll, self.selected_table)
        if self.expanded_table is not None and self.expanded_table >= len(tables):
            self.expanded_table = None
        self.last_tables_update = time.monotonic()

    # ============== Results ==============

    def clear_result(self) -> None:
        self.result = ResultSet()
        self.window.reset()

    def reset_workspace(self) -> None:
        """Forget editor text and query output (leaving the table view)."""
        self.editor.clear()
        self.clear_result()
        self.sql_query_error = None
        self.sql_query_success_message = None
        self.show_debug = False

    def forget_database(self) -> None:
        """Drop everything cached for the previously opened database."""
        self.tables = []
        self.selected_table = 0
        self.tables_scroll = 0
        self.expanded_table = None
        self.table_schemas.clear()
        self.tables_error = None

    def add_debug_info(self, message: str) -> None:
        """Append to the bounded debug buffer shown with F12."""
        self.debug_info.append(message)
        logger.debug(message)
