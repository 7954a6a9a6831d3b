"""Port for schema-time seed registration."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Sequence


@runtime_checkable
class DeclarativeSink(Protocol):
    """Accepts one finished batch of materialized records per entity type."""

    def seed[TEntity](self, entity_type: type[TEntity], records: Sequence[TEntity]) -> None: ...
