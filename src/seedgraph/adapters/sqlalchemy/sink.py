"""Declarative seed sinks: schema-creation hooks and Alembic bulk inserts."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from sqlalchemy import Table, event, inspect

if TYPE_CHECKING:
    from collections.abc import Callable, Mapping, Sequence

    from alembic.operations import Operations
    from sqlalchemy.engine import Connection

log = logging.getLogger(__name__)

type Row = dict[str, Any]


class UnmappedEntityError(LookupError):
    """Raised when no table is known for an entity type."""

    def __init__(self, entity_type: type) -> None:
        self.entity_type = entity_type
        super().__init__(f"No table is mapped for {entity_type.__name__}")


def table_for(entity_type: type, tables: Mapping[type, Table] | None = None) -> Table:
    """Return the explicit table for ``entity_type`` or its mapper's local table."""

    if tables and entity_type in tables:
        return tables[entity_type]
    mapper = inspect(entity_type, raiseerr=False)
    if mapper is None or not isinstance(mapper.local_table, Table):
        raise UnmappedEntityError(entity_type)
    return mapper.local_table


def row_for(record: object, table: Table) -> Row:
    """Build the column-keyed insert row of ``record``.

    Mapped classes are read through their column attributes, which may be named
    differently from the columns; other objects are read by column key.
    """

    mapper = inspect(type(record), raiseerr=False)
    row: Row = {}
    if mapper is not None:
        for attribute in mapper.column_attrs:
            for column in attribute.columns:
                if getattr(column, "table", None) is table:
                    row[column.key] = getattr(record, attribute.key, None)
        return row
    for column in table.columns:
        if hasattr(record, column.key):
            row[column.key] = getattr(record, column.key)
    return row


class SqlAlchemySeedSink:
    """Inserts seed rows when their table is created.

    Usage::

        sink = SqlAlchemySeedSink()
        seeder.apply_to_sink(sink)
        metadata.create_all(engine)  # rows are inserted table by table

    ``create_all`` creates tables in foreign-key dependency order, so parent rows
    exist before their children are inserted. Seeding a type again replaces its
    pending rows.
    """

    def __init__(self, tables: Mapping[type, Table] | None = None) -> None:
        self._tables: dict[type, Table] = dict(tables or {})
        self._rows: dict[Table, list[Row]] = {}
        self._listeners: dict[Table, Callable[..., None]] = {}

    def seed[TEntity](self, entity_type: type[TEntity], records: Sequence[TEntity]) -> None:
        table = table_for(entity_type, self._tables)
        self._rows[table] = [row_for(record, table) for record in records]
        if table not in self._listeners:
            listener = self._listener_for(table)
            event.listen(table, "after_create", listener)
            self._listeners[table] = listener
        log.debug("Queued %d seed row(s) for table %s", len(records), table.name)

    def rows_for(self, entity_type: type) -> list[Row]:
        return list(self._rows.get(table_for(entity_type, self._tables), ()))

    def remove(self) -> None:
        """Detach every ``after_create`` listener added by this sink."""

        for table, listener in self._listeners.items():
            event.remove(table, "after_create", listener)
        self._listeners.clear()

    def _listener_for(self, table: Table) -> Callable[..., None]:
        def insert_seed_rows(target: Table, connection: Connection, **_: Any) -> None:
            rows = self._rows.get(table)
            if not rows:
                return
            connection.execute(target.insert(), rows)
            log.info("Inserted %d seed row(s) into %s", len(rows), target.name)

        return insert_seed_rows


class AlembicSeedSink:
    """Emits seed rows as ``op.bulk_insert`` calls inside a migration script.

    Usage inside ``upgrade()``::

        seeder.apply_to_sink(AlembicSeedSink(op))
    """

    def __init__(self, operations: Operations, tables: Mapping[type, Table] | None = None) -> None:
        self._operations = operations
        self._tables: dict[type, Table] = dict(tables or {})

    def seed[TEntity](self, entity_type: type[TEntity], records: Sequence[TEntity]) -> None:
        table = table_for(entity_type, self._tables)
        rows = [row_for(record, table) for record in records]
        if not rows:
            return
        self._operations.bulk_insert(table, rows)
        log.info("Bulk inserted %d seed row(s) into %s", len(rows), table.name)


if TYPE_CHECKING:
    from seedgraph.domain.ports import DeclarativeSink

    _sink_check: DeclarativeSink = SqlAlchemySeedSink()
