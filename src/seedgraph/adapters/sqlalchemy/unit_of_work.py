"""SQLAlchemy-backed unit of work for applying seed entities."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Literal

from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker

from seedgraph.config import get_database_config

from .store import SqlAlchemyLiveStore

if TYPE_CHECKING:
    from types import TracebackType

    from sqlalchemy import MetaData
    from sqlalchemy.engine import Engine

log = logging.getLogger(__name__)


class StartupError(RuntimeError):
    """Raised when the adapter or a unit of work is used out of order."""


@dataclass(slots=True)
class _AdapterState:
    engine: Engine | None = None
    _sessions: sessionmaker[Session] | None = field(default=None, repr=False)

    def attach(self, engine: Engine | None) -> None:
        self.engine = engine
        self._sessions = None

    def sessions(self) -> sessionmaker[Session]:
        if self.engine is None:
            raise StartupError(
                "SQLAlchemy adapter not started; call "
                "seedgraph.adapters.sqlalchemy.startup() before opening a unit of work."
            )
        if self._sessions is None:
            # seeded instances stay readable after the block commits
            self._sessions = sessionmaker(bind=self.engine, expire_on_commit=False)
        return self._sessions


_STATE = _AdapterState()


def startup(
    *,
    engine: Engine | None = None,
    database_uri: str | None = None,
    metadata: MetaData | None = None,
    force: bool = False,
) -> Engine:
    """Bind the adapter to ``engine``, or to one built from the configured database.

    When ``metadata`` is given its tables are created, which also fires any
    ``after_create`` seed listeners attached to them.
    """

    current = _STATE.engine
    if current is not None:
        if not force:
            raise StartupError("SQLAlchemy adapter already started; pass force=True to rebind.")
        if engine is not current:
            current.dispose()

    if engine is None:
        config = get_database_config()
        engine = create_engine(database_uri or config.uri, echo=config.echo)
    if metadata is not None:
        metadata.create_all(engine)
    _STATE.attach(engine)
    log.debug("SQLAlchemy adapter started on %s", engine.url)
    return engine


def configured_engine() -> Engine | None:
    return _STATE.engine


def is_started() -> bool:
    return _STATE.engine is not None


def shutdown() -> None:
    """Dispose the adapter's engine; safe to call when nothing was started."""

    if _STATE.engine is not None:
        _STATE.engine.dispose()
    _STATE.attach(None)


class SqlAlchemySeedUnitOfWork:
    """Session scope whose store reconciles registered entities into the database.

    Leaving the block with an exception rolls the session back; committing is up
    to the caller.
    """

    def __init__(self, session_factory: sessionmaker[Session] | None = None) -> None:
        self.session_factory = session_factory or _STATE.sessions()
        self._session: Session | None = None
        self._store: SqlAlchemyLiveStore | None = None

    def __enter__(self) -> SqlAlchemySeedUnitOfWork:
        if self._session is not None:
            raise StartupError("Unit of work is already open")
        self._session = self.session_factory()
        self._store = SqlAlchemyLiveStore(self._session)
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> Literal[False]:
        session = self.session
        try:
            if exc_type is not None:
                session.rollback()
        finally:
            session.close()
            self._session = None
            self._store = None
        return False

    @property
    def session(self) -> Session:
        if self._session is None:
            raise StartupError("Unit of work is not open")
        return self._session

    @property
    def store(self) -> SqlAlchemyLiveStore:
        if self._store is None:
            raise StartupError("Unit of work is not open")
        return self._store

    def commit(self) -> None:
        self.session.commit()

    def rollback(self) -> None:
        self.session.rollback()


if TYPE_CHECKING:
    from seedgraph.domain.ports import SeedUnitOfWork

    _uow_check: SeedUnitOfWork = SqlAlchemySeedUnitOfWork()
