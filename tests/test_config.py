from config import ALLOWED_TABLES, ROW_LIMIT, TABLE_PREFIX, Settings


def test_defaults(monkeypatch):
    for name in ("GEO_DB_BACKEND", "GEO_ROW_LIMIT", "GEO_API_URL", "GEO_HEAT_WEIGHT", "PORT"):
        monkeypatch.delenv(name, raising=False)
    s = Settings.from_env()
    assert s.db_backend == "duckdb"
    assert s.row_limit == ROW_LIMIT == 10_000
    assert s.api_url == "http://localhost:4000/api"
    assert s.api_port == 4000
    assert s.heat_weight == "count"


def test_env_overrides(monkeypatch):
    monkeypatch.setenv("GEO_DB_BACKEND", "Postgres")
    monkeypatch.setenv("PGHOST", "db.local")
    monkeypatch.setenv("GEO_API_URL", "http://backend:4000/api/")
    monkeypatch.setenv("GEO_HEAT_WEIGHT", "KW")
    s = Settings.from_env()
    assert s.db_backend == "postgres"
    assert s.api_url == "http://backend:4000/api"
    assert s.heat_weight == "kw"
    assert "host=db.local" in s.postgres_dsn


def test_allow_list():
    assert len(ALLOWED_TABLES) == 6
    assert all(t.startswith(TABLE_PREFIX) for t in ALLOWED_TABLES)
