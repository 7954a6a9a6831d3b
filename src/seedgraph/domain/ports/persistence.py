"""Ports for pushing registered entities into a live store."""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class EntitySet[TEntity](Protocol):
    """Keyed access to the stored records of one entity type."""

    def find(self, key: object) -> TEntity | None: ...

    def add(self, entity: TEntity) -> None: ...

    def update(self, entity: TEntity) -> None: ...


@runtime_checkable
class LiveStore(Protocol):
    """A queryable store exposing one entity set per supported type."""

    def entity_set[TEntity](self, entity_type: type[TEntity]) -> EntitySet[TEntity] | None:
        """Return the set for ``entity_type``, or ``None`` when the store does not hold it."""
        ...

    def flush(self) -> None:
        """Make pending additions visible to the store before the next type is applied."""
        ...
