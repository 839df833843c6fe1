"""
Textual application shell.

The shell owns the terminal: Textual enters raw mode and the alternate
screen on start and restores the terminal on every exit path, including
exceptions. Its only job is the loop body:

1. read one key event
2. await the current screen's handler
3. run the lazy refresh for the (possibly new) screen
4. re-render the panes from the session

Default bindings are disabled so Tab, Escape and Ctrl+C reach the handlers.
"""
from typing import Optional

from textual import events
from textual.app import App, ComposeResult
from textual.containers import Horizontal, Vertical
from textual.screen import Screen as TextualScreen
from textual.widgets import Static

from sqlpane.core.logging_config import get_logger
from sqlpane.ui import screens
from sqlpane.ui.handlers import KeyDispatcher, KeyPress, prepare_screen
from sqlpane.ui.machine import Screen
from sqlpane.ui.state import DatabaseClientUI

logger = get_logger(__name__)

# Rows taken by the result panel border, table header and message line
_RESULT_CHROME = 6


class TextualClipboard:
    """Clipboard backed by the terminal (OSC 52) through Textual."""

    def __init__(self, app: App):
        self.app = app

    def copy(self, text: str) -> None:
        self.app.copy_to_clipboard(text)


class ClientScreen(TextualScreen):
    """The single Textual screen; session.current_screen picks the layout."""

    inherit_bindings = False
    BINDINGS = []

    def __init__(self, session: DatabaseClientUI, dispatcher: KeyDispatcher):
        super().__init__()
        self.session = session
        self.dispatcher = dispatcher

    def compose(self) -> ComposeResult:
        with Vertical(id="dialog-view"):
            yield Static(id="dialog")
            yield Static(id="dialog-help")
        with Vertical(id="workspace-view"):
            with Horizontal(id="main"):
                yield Static(id="tables")
                with Vertical(id="right"):
                    yield Static(id="editor")
                    yield Static(id="results")
            yield Static(id="status")

    async def on_mount(self) -> None:
        await self.refresh_view()

    async def on_resize(self, event: events.Resize) -> None:
        await self.refresh_view()

    async def on_key(self, event: events.Key) -> None:
        event.stop()
        event.prevent_default()
        key = KeyPress(event.key, event.character)
        logger.debug(f"Key {key.key!r} on {self.session.current_screen.name}")

        await self.dispatcher.dispatch(self.session, key)
        if self.session.should_exit:
            logger.info("Exit requested")
            self.app.exit(return_code=0)
            return
        await self.refresh_view()

    async def refresh_view(self) -> None:
        self._sync_viewports()
        await prepare_screen(self.session)
        self._draw()

    def _sync_viewports(self) -> None:
        results_height = self.query_one("#results", Static).size.height
        editor_height = self.query_one("#editor", Static).size.height
        self.session.window.visible_rows = max(1, results_height - _RESULT_CHROME)
        self.session.editor_viewport = max(1, editor_height - 2)
        tables_height = self.query_one("#tables", Static).size.height
        # Hidden outside the table view; keep the last measured height
        if tables_height > 2:
            self.session.tables_viewport = tables_height - 2
            self.session.keep_table_visible()

    def _draw(self) -> None:
        session = self.session
        in_workspace = session.current_screen is Screen.TABLE_VIEW
        self.query_one("#dialog-view").display = not in_workspace
        self.query_one("#workspace-view").display = in_workspace

        if in_workspace:
            self.query_one("#tables", Static).update(screens.render_tables_list(session, session.tables_viewport))
            self.query_one("#editor", Static).update(screens.render_editor(session))
            self.query_one("#results", Static).update(screens.render_results(session))
            self.query_one("#status", Static).update(screens.table_view_help())
            return

        dialog, help_text = {
            Screen.MESSAGE_POPUP: (screens.render_message_popup, None),
            Screen.DB_TYPE_SELECTION: (screens.render_db_type_selection, screens.db_type_help),
            Screen.CONNECTION_INPUT: (screens.render_connection_input, screens.connection_input_help),
            Screen.DATABASE_SELECTION: (screens.render_database_selection, screens.database_selection_help),
        }[session.current_screen]
        self.query_one("#dialog", Static).update(dialog(session))
        self.query_one("#dialog-help", Static).update(help_text() if help_text else "")


class SqlPaneApp(App):
    """
    Terminal database client.

    Example:
        >>> app = SqlPaneApp(DatabaseClientUI.create())
        >>> app.run()
    """

    CSS = """
    #dialog-view {
        align: center middle;
    }

    #dialog, #dialog-help {
        width: 70;
        height: auto;
    }

    #main {
        height: 1fr;
    }

    #tables {
        width: 30%;
        height: 100%;
    }

    #right {
        width: 70%;
    }

    #editor, #results {
        height: 1fr;
    }

    #status {
        height: 1;
    }
    """

    inherit_bindings = False
    BINDINGS = []
    ENABLE_COMMAND_PALETTE = False

    def __init__(self, session: DatabaseClientUI, dispatcher: Optional[KeyDispatcher] = None):
        super().__init__()
        self.session = session
        self.dispatcher = dispatcher or KeyDispatcher(TextualClipboard(self))
        self.title = session.settings.app_name

    def get_default_screen(self) -> TextualScreen:
        return ClientScreen(self.session, self.dispatcher)

    async def on_unmount(self) -> None:
        await self.session.registry.clear()
