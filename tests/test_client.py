from unittest.mock import MagicMock

import pytest
import requests

from api.client import ApiClient, ApiError


def _response(ok=True, status=200, body=None):
    resp = MagicMock()
    resp.ok = ok
    resp.status_code = status
    resp.json.return_value = body
    return resp


def _client(session):
    return ApiClient(base_url="http://api.test/api/", timeout=5, session=session)


def test_fetch_table_quotes_table_name():
    session = MagicMock()
    session.request.return_value = _response(body=[{"Ort": "Gülzow"}])
    rows = _client(session).fetch_table("Gefilterte_Adressen_Gülzow")
    assert rows == [{"Ort": "Gülzow"}]
    session.request.assert_called_once_with(
        "GET", "http://api.test/api/data/Gefilterte_Adressen_G%C3%BClzow", timeout=5
    )


def test_fetch_table_error_body():
    session = MagicMock()
    session.request.return_value = _response(ok=False, status=400, body={"error": "Tabelle nicht erlaubt"})
    with pytest.raises(ApiError) as exc:
        _client(session).fetch_table("users")
    assert str(exc.value) == "Tabelle nicht erlaubt"
    assert exc.value.status == 400


def test_fetch_table_unexpected_shape():
    session = MagicMock()
    session.request.return_value = _response(body={"rows": []})
    with pytest.raises(ApiError):
        _client(session).fetch_table("Gefilterte_Adressen_Worth")


def test_network_error_becomes_api_error():
    session = MagicMock()
    session.request.side_effect = requests.ConnectionError("refused")
    with pytest.raises(ApiError) as exc:
        _client(session).list_tables()
    assert exc.value.status is None


def test_update_coords_posts_payload():
    session = MagicMock()
    session.request.return_value = _response(body={"success": True, "updated": 2})
    updated = _client(session).update_coords(
        "Gefilterte_Adressen_Worth", plz="21502", ort="Worth", strasse="Dorfstraße", hausnr="1",
        latitude=53.46, longitude=10.41,
    )
    assert updated == 2
    args, kwargs = session.request.call_args
    assert args == ("POST", "http://api.test/api/update-coords/Gefilterte_Adressen_Worth")
    assert kwargs["json"]["hausnr"] == "1"
    assert kwargs["json"]["latitude"] == 53.46


def test_update_coords_not_found():
    session = MagicMock()
    session.request.return_value = _response(ok=False, status=404, body={"error": "Kein passender Datensatz gefunden"})
    with pytest.raises(ApiError) as exc:
        _client(session).update_coords("T", "1", "A", "B", "2", 1.0, 2.0)
    assert exc.value.status == 404
