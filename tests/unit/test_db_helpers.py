import psycopg
import pytest

from app.db import helpers
from app.db.helpers import DatabaseError, fetch_all


class _FailingCursor:
    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc):
        return False

    async def execute(self, query, params):
        raise psycopg.OperationalError("connection lost")


class _Connection:
    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc):
        return False

    def cursor(self):
        return _FailingCursor()


@pytest.mark.asyncio
async def test_fetch_all_wraps_driver_errors(monkeypatch):
    async def fake_get_db_connection():
        return _Connection()

    monkeypatch.setattr(helpers, "get_db_connection", fake_get_db_connection)

    with pytest.raises(DatabaseError) as exc:
        await fetch_all("SELECT 1")

    assert exc.value.operation == "fetch_all"
    assert "connection lost" in str(exc.value)
