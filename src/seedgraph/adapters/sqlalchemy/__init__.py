"""SQLAlchemy adapter package for seedgraph."""

from __future__ import annotations

from .sink import AlembicSeedSink, SqlAlchemySeedSink, UnmappedEntityError, row_for, table_for
from .store import SqlAlchemyEntitySet, SqlAlchemyLiveStore, is_mapped
from .unit_of_work import (
    SqlAlchemySeedUnitOfWork,
    StartupError,
    configured_engine,
    is_started,
    shutdown,
    startup,
)

__all__ = [
    "AlembicSeedSink",
    "SqlAlchemyEntitySet",
    "SqlAlchemyLiveStore",
    "SqlAlchemySeedSink",
    "SqlAlchemySeedUnitOfWork",
    "StartupError",
    "UnmappedEntityError",
    "configured_engine",
    "is_mapped",
    "is_started",
    "row_for",
    "shutdown",
    "startup",
    "table_for",
]
