from unittest.mock import AsyncMock, MagicMock

import pytest

from resale_admin.tickets.models import ConsoleSnapshot
from resale_admin.tickets.service import TransitionFailedError
from resale_admin.ui import streamlit_app


@pytest.fixture
def fake_st(monkeypatch):
    fake = MagicMock()
    fake.session_state = {}
    monkeypatch.setattr(streamlit_app, "st", fake)
    return fake


def test_successful_write_redraws_from_reloaded_snapshot(fake_st):
    snapshot = ConsoleSnapshot(tickets=[])
    action = AsyncMock(return_value=snapshot)

    streamlit_app._apply(action, "Ticket cancelled")

    action.assert_awaited_once()
    assert fake_st.session_state["snapshot"] is snapshot
    fake_st.success.assert_called_once_with("Ticket cancelled")
    fake_st.rerun.assert_called_once()


def test_failed_write_shows_error_without_redraw(fake_st):
    previous = ConsoleSnapshot(tickets=[])
    fake_st.session_state["snapshot"] = previous
    action = AsyncMock(side_effect=TransitionFailedError("Seat already sold", status_code=409))

    streamlit_app._apply(action, "Refund recorded")

    fake_st.error.assert_called_once_with("Seat already sold")
    fake_st.rerun.assert_not_called()
    assert fake_st.session_state["snapshot"] is previous
