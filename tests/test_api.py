import pytest
from fastapi.testclient import TestClient

from api.server import create_app
from db.core import ensure_store_schema, insert_records
from db.pool import ConnectionPool
from records.schema import records_from_rows

TABLE = "Gefilterte_Adressen_Geesthacht"
MISSING_TABLE = "Gefilterte_Adressen_Worth"


@pytest.fixture
def pool(rows):
    pool = ConnectionPool(database=":memory:", size=2)
    with pool.acquire() as con:
        ensure_store_schema(con, [TABLE])
        insert_records(con, TABLE, records_from_rows(rows))
    yield pool
    pool.close()


@pytest.fixture
def client(pool):
    return TestClient(create_app(pool=pool))


def _payload(**overrides):
    payload = {
        "plz": "21502",
        "ort": "Worth",
        "strasse": "Dorfstraße",
        "hausnr": "1",
        "latitude": 53.4599,
        "longitude": 10.4102,
    }
    payload.update(overrides)
    return payload


def test_list_tables(client):
    resp = client.get("/api/tables")
    assert resp.status_code == 200
    assert TABLE in resp.json()["tables"]


def test_get_data_returns_rows(client):
    resp = client.get(f"/api/data/{TABLE}")
    assert resp.status_code == 200
    rows = resp.json()
    assert len(rows) == 3
    assert rows[0]["Ort"] == "Geesthacht"
    assert rows[0]["latitude"] == pytest.approx(53.4371)
    assert rows[2]["latitude"] is None


def test_get_data_row_limit(pool):
    client = TestClient(create_app(pool=pool, row_limit=2))
    assert len(client.get(f"/api/data/{TABLE}").json()) == 2


def test_get_data_rejects_unknown_table(client):
    resp = client.get("/api/data/users")
    assert resp.status_code == 400
    assert resp.json() == {"error": "Tabelle nicht erlaubt"}


def test_get_data_store_error_is_500(client):
    # allow-listed but never created
    resp = client.get(f"/api/data/{MISSING_TABLE}")
    assert resp.status_code == 500
    assert resp.json()["error"]


def test_update_coords(client):
    resp = client.post(f"/api/update-coords/{TABLE}", json=_payload())
    assert resp.status_code == 200
    assert resp.json() == {"success": True, "updated": 1}

    rows = client.get(f"/api/data/{TABLE}").json()
    worth = [r for r in rows if r["Ort"] == "Worth"][0]
    assert worth["latitude"] == pytest.approx(53.4599)
    assert worth["longitude"] == pytest.approx(10.4102)


def test_update_coords_unmatched_key_is_404(client):
    resp = client.post(f"/api/update-coords/{TABLE}", json=_payload(hausnr="99"))
    assert resp.status_code == 404
    assert resp.json() == {"error": "Kein passender Datensatz gefunden"}


def test_update_coords_missing_fields(client):
    payload = _payload()
    del payload["latitude"]
    payload["ort"] = "  "
    resp = client.post(f"/api/update-coords/{TABLE}", json=payload)
    assert resp.status_code == 400
    assert resp.json() == {"error": "Fehlende Felder: ort, latitude"}


def test_update_coords_without_body(client):
    resp = client.post(f"/api/update-coords/{TABLE}")
    assert resp.status_code == 400
    assert resp.json()["error"].startswith("Fehlende Felder")


def test_update_coords_zero_is_a_value(client):
    resp = client.post(f"/api/update-coords/{TABLE}", json=_payload(latitude=0, longitude=0))
    assert resp.status_code == 200


def test_update_coords_rejects_unknown_table(client):
    resp = client.post("/api/update-coords/users", json=_payload())
    assert resp.status_code == 400
    assert resp.json() == {"error": "Tabelle nicht erlaubt"}


def test_update_coords_invalid_coordinates(client):
    resp = client.post(f"/api/update-coords/{TABLE}", json=_payload(latitude="nord"))
    assert resp.status_code == 400
    assert resp.json() == {"error": "Ungültige Koordinaten"}
