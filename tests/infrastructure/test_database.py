"""Database Session Manager - error mapping on SQLite."""

import pytest
from sqlalchemy import text
from sqlalchemy.exc import OperationalError

from backstop.core.errors import DatabaseError
from backstop.infrastructure import database
from backstop.infrastructure.database import DatabaseSessionManager


@pytest.fixture
async def manager():
    mgr = DatabaseSessionManager("sqlite+aiosqlite:///:memory:")
    yield mgr
    await mgr.dispose()


async def test_operational_error_mapped(manager):
    with pytest.raises(DatabaseError) as exc:
        async with manager.session() as db:
            await db.execute(text("SELECT * FROM no_such_table"))

    assert exc.value.operation == "execute"
    assert isinstance(exc.value.__context__, OperationalError)


async def test_domain_errors_pass_through(manager):
    with pytest.raises(KeyError):
        async with manager.session():
            raise KeyError("not a database problem")


def test_get_db_manager_requires_init(monkeypatch):
    monkeypatch.setattr(database, "db_manager", None)

    with pytest.raises(RuntimeError):
        database.get_db_manager()


def test_init_db_sets_singleton(monkeypatch):
    monkeypatch.setattr(database, "db_manager", None)

    mgr = database.init_db("sqlite+aiosqlite:///:memory:")

    assert database.get_db_manager() is mgr
