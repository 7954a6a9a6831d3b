"""Per-type buckets of registered entities."""

from __future__ import annotations

from typing import Any


class TypeRegistry:
    """Ordered, identity-deduplicated buckets keyed by the entity's exact type.

    Registration order matters: reconciliation treats earlier instances as
    "first" and later ones as "last".
    """

    def __init__(self) -> None:
        self._buckets: dict[type, list[Any]] = {}
        self._members: dict[type, set[int]] = {}

    def add(self, entity: object) -> bool:
        """Append ``entity`` to its bucket; return ``False`` when it is already present."""

        entity_type = type(entity)
        members = self._members.setdefault(entity_type, set())
        if id(entity) in members:
            return False
        members.add(id(entity))
        self._buckets.setdefault(entity_type, []).append(entity)
        return True

    def get[T](self, entity_type: type[T]) -> tuple[T, ...]:
        return tuple(self._buckets.get(entity_type, ()))

    def __contains__(self, entity: object) -> bool:
        return id(entity) in self._members.get(type(entity), ())

    @property
    def entity_types(self) -> tuple[type, ...]:
        return tuple(self._buckets)

    def __len__(self) -> int:
        return sum(len(bucket) for bucket in self._buckets.values())

    def clear(self) -> None:
        self._buckets.clear()
        self._members.clear()
