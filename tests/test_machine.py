"""
Tests for the screen transition table.
"""

import pytest

from sqlpane.ui.machine import TRANSITIONS, InvalidTransition, Screen, Trigger, next_screen


class TestTransitions:
    """Legal and illegal screen changes."""

    @pytest.mark.parametrize("screen,trigger,expected", [
        (Screen.DB_TYPE_SELECTION, Trigger.SELECT_SERVER_TYPE, Screen.CONNECTION_INPUT),
        (Screen.DB_TYPE_SELECTION, Trigger.SELECT_UNSUPPORTED_TYPE, Screen.MESSAGE_POPUP),
        (Screen.MESSAGE_POPUP, Trigger.DISMISS, Screen.DB_TYPE_SELECTION),
        (Screen.CONNECTION_INPUT, Trigger.BACK, Screen.DB_TYPE_SELECTION),
        (Screen.CONNECTION_INPUT, Trigger.CONNECTED, Screen.DATABASE_SELECTION),
        (Screen.DATABASE_SELECTION, Trigger.DATABASE_OPENED, Screen.TABLE_VIEW),
        (Screen.TABLE_VIEW, Trigger.BACK, Screen.DATABASE_SELECTION),
    ])
    def test_listed_transitions(self, screen, trigger, expected):
        """Each listed pair leads to its target screen."""
        assert next_screen(screen, trigger) is expected

    def test_table_is_complete(self):
        """Exactly seven moves exist."""
        assert len(TRANSITIONS) == 7

    def test_unlisted_pairs_raise(self):
        """Every other pair is rejected."""
        for screen in Screen:
            for trigger in Trigger:
                if (screen, trigger) in TRANSITIONS:
                    continue
                with pytest.raises(InvalidTransition):
                    next_screen(screen, trigger)

    def test_invalid_transition_is_value_error(self):
        """Callers can catch it as a ValueError."""
        with pytest.raises(ValueError, match="DATABASE_SELECTION on BACK"):
            next_screen(Screen.DATABASE_SELECTION, Trigger.BACK)

    def test_session_transition(self, session):
        """The session moves through the same table."""
        session.transition(Trigger.SELECT_SERVER_TYPE)
        assert session.current_screen is Screen.CONNECTION_INPUT
        with pytest.raises(InvalidTransition):
            session.transition(Trigger.DATABASE_OPENED)
        assert session.current_screen is Screen.CONNECTION_INPUT
