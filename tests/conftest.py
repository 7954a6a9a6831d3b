from __future__ import annotations

import os
from typing import TYPE_CHECKING

import pytest
from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine  # noqa: TC002
from sqlalchemy.orm import Session, sessionmaker

from seedgraph.adapters.sqlalchemy.unit_of_work import (
    SqlAlchemySeedUnitOfWork,
    shutdown,
    startup,
)
from seedgraph.config import DUPLICATE_POLICY_ENV_VAR
from tests.helpers.library_tables import metadata, start_mappers

os.environ.setdefault("DATABASE_URI", "sqlite+pysqlite:///:memory:")

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator
    from sqlite3 import Connection


@pytest.fixture(autouse=True)
def _clear_policy_env(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    monkeypatch.delenv(DUPLICATE_POLICY_ENV_VAR, raising=False)
    yield
    # load_dotenv writes to os.environ directly
    os.environ.pop(DUPLICATE_POLICY_ENV_VAR, None)


def _enable_foreign_keys(dbapi_connection: Connection, _connection_record: object) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


@pytest.fixture
def sqlite_engine() -> Iterator[Engine]:
    engine = create_engine("sqlite+pysqlite:///:memory:")
    event.listen(engine, "connect", _enable_foreign_keys)
    start_mappers()
    metadata.create_all(engine)
    try:
        yield engine
    finally:
        engine.dispose()


@pytest.fixture
def sqlite_session(sqlite_engine: Engine) -> Iterator[Session]:
    session_factory = sessionmaker(bind=sqlite_engine)
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def sqlite_unit_of_work(
    sqlite_engine: Engine,
) -> Iterator[Callable[[], SqlAlchemySeedUnitOfWork]]:
    startup(engine=sqlite_engine, force=True)

    def factory() -> SqlAlchemySeedUnitOfWork:
        return SqlAlchemySeedUnitOfWork()

    try:
        yield factory
    finally:
        shutdown()
