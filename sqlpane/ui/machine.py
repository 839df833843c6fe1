"""
Screen transitions.

Every screen change goes through next_screen(): the table below is the
complete list of legal moves, and anything else raises InvalidTransition.
Quitting is not a screen; handlers set session.should_exit instead.
"""
from enum import Enum
from typing import Dict, Tuple


class Screen(Enum):
    """Exactly one screen is current at any time."""
    DB_TYPE_SELECTION = "db_type_selection"
    CONNECTION_INPUT = "connection_input"
    DATABASE_SELECTION = "database_selection"
    TABLE_VIEW = "table_view"
    MESSAGE_POPUP = "message_popup"


class Trigger(Enum):
    SELECT_SERVER_TYPE = "select_server_type"
    SELECT_UNSUPPORTED_TYPE = "select_unsupported_type"
    DISMISS = "dismiss"
    BACK = "back"
    CONNECTED = "connected"
    DATABASE_OPENED = "database_opened"


class InvalidTransition(ValueError):
    """Raised for a (screen, trigger) pair with no entry in TRANSITIONS."""

    def __init__(self, screen: Screen, trigger: Trigger):
        super().__init__(f"No transition from {screen.name} on {trigger.name}")
        self.screen = screen
        self.trigger = trigger


TRANSITIONS: Dict[Tuple[Screen, Trigger], Screen] = {
    (Screen.DB_TYPE_SELECTION, Trigger.SELECT_SERVER_TYPE): Screen.CONNECTION_INPUT,
    (Screen.DB_TYPE_SELECTION, Trigger.SELECT_UNSUPPORTED_TYPE): Screen.MESSAGE_POPUP,
    (Screen.MESSAGE_POPUP, Trigger.DISMISS): Screen.DB_TYPE_SELECTION,
    (Screen.CONNECTION_INPUT, Trigger.BACK): Screen.DB_TYPE_SELECTION,
    (Screen.CONNECTION_INPUT, Trigger.CONNECTED): Screen.DATABASE_SELECTION,
    (Screen.DATABASE_SELECTION, Trigger.DATABASE_OPENED): Screen.TABLE_VIEW,
    (Screen.TABLE_VIEW, Trigger.BACK): Screen.DATABASE_SELECTION,
}


def next_screen(screen: Screen, trigger: Trigger) -> Screen:
    """
    Look up the screen reached from screen on trigger.

    Raises:
        InvalidTransition: If the pair is not in TRANSITIONS
    """
    try:
        return TRANSITIONS[(screen, trigger)]
    except KeyError:
        raise InvalidTransition(screen, trigger) from None
