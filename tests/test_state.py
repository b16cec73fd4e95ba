from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest

import ui.state as state
from api.client import ApiError
from config import ALLOWED_TABLES
from map.overlays import DEFAULT_OVERLAY, OverlayKind


@pytest.fixture
def session(monkeypatch):
    data = {}
    monkeypatch.setattr(state, "st", SimpleNamespace(session_state=data))
    return data


def test_reset_filters_clears_widgets_and_overlay(session):
    session.update(
        ga_overlay=OverlayKind.CLUSTER.value,
        ga_f_orte=["Worth"],
        ga_f_kw=(0.0, 5.0),
        ga_f_search="dorf",
        ga_source=state.SOURCE_API,
    )
    state.reset_filters()
    assert session["ga_overlay"] == DEFAULT_OVERLAY.value
    assert not any(key in session for key in state.FILTER_KEYS)
    assert session["ga_source"] == state.SOURCE_API


def test_set_records_per_source_and_refit(session, records):
    state.init_state()
    controller = state.viewport_controller()
    controller.reset = MagicMock()

    state.set_records(records, state.SOURCE_EXCEL)
    assert state.current_records(state.SOURCE_EXCEL) is records
    assert state.current_records() is None
    controller.reset.assert_called_once()

    state.set_records(records, state.SOURCE_API, refit=False)
    assert state.current_records() is records
    controller.reset.assert_called_once()


def test_served_tables_keeps_allow_list_order():
    client = MagicMock()
    client.list_tables.return_value = [ALLOWED_TABLES[2], "other", ALLOWED_TABLES[0]]
    assert state.served_tables(client) == [ALLOWED_TABLES[0], ALLOWED_TABLES[2]]


def test_served_tables_falls_back_to_allow_list():
    client = MagicMock()
    client.list_tables.side_effect = ApiError("down")
    assert state.served_tables(client) == list(ALLOWED_TABLES)
