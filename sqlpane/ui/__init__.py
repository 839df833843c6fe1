"""
UI module - the interactive session.

This module handles:
- state.py    : Session state and connection form
- machine.py  : Screen transition table
- editor.py   : SQL editor buffer
- results.py  : Result buffer and viewport windowing
- backends.py : PostgreSQL/MySQL adapters over the connection registry
- handlers.py : Per-screen key handling and lazy refresh
- screens.py  : Rich render routines
- app.py      : Textual application shell
"""
from sqlpane.ui.handlers import KeyDispatcher, KeyPress, prepare_screen
from sqlpane.ui.machine import InvalidTransition, Screen, Trigger
from sqlpane.ui.state import DatabaseClientUI, DatabaseType, FocusedWidget, InputField

__all__ = [
    "KeyDispatcher",
    "KeyPress",
    "prepare_screen",
    "InvalidTransition",
    "Screen",
    "Trigger",
    "DatabaseClientUI",
    "DatabaseType",
    "FocusedWidget",
    "InputField",
]
