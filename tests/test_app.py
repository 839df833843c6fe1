"""
Smoke tests for the Textual shell, driven headlessly with App.run_test().
"""

import asyncio

from conftest import FakeClipboard
from sqlpane.ui.app import SqlPaneApp
from sqlpane.ui.handlers import KeyDispatcher
from sqlpane.ui.machine import Screen
from sqlpane.ui.state import DatabaseClientUI, InputField


class TestSqlPaneApp:
    """Keys reach the handlers through the Textual event loop."""

    def test_popup_round_trip_and_quit(self, settings):
        """SQLite opens the popup, any key closes it, q exits with code 0."""
        session = DatabaseClientUI.create(settings)
        app = SqlPaneApp(session, KeyDispatcher(FakeClipboard()))
        seen = []

        async def scenario():
            async with app.run_test() as pilot:
                await pilot.press("down", "down", "enter")
                seen.append(session.current_screen)
                await pilot.press("x")
                seen.append(session.current_screen)
                await pilot.press("q")

        asyncio.run(scenario())
        assert seen == [Screen.MESSAGE_POPUP, Screen.DB_TYPE_SELECTION]
        assert session.should_exit
        assert app.return_code == 0

    def test_connection_form_typing_and_escape(self, settings, fake_backend):
        """Typed characters and Escape are not swallowed by default bindings."""
        session = DatabaseClientUI.create(settings)
        app = SqlPaneApp(session, KeyDispatcher(FakeClipboard()))

        async def scenario():
            async with app.run_test() as pilot:
                await pilot.press("enter", "a", "d", "m", "enter")
                assert session.connection_input.username == "adm"
                assert session.connection_input.current_field is InputField.PASSWORD
                await pilot.press("escape")
                assert session.current_screen is Screen.DB_TYPE_SELECTION
                await pilot.press("q")

        asyncio.run(scenario())
        assert app.return_code == 0
