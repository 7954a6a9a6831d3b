"""Duplicate-key reconciliation against a live, queryable store.

Each candidate is checked first against the entities already applied in this
run, then against the store itself. What happens on a collision depends on the
:class:`DuplicatePolicy`.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from ..errors import ApplyError, KeyCollisionError
from ..extraction import persistable_fields
from ..introspection import describe
from ..policy import DuplicatePolicy
from ..relationships import find_primary_key, require_primary_key
from .keys import synthesize_key

if TYPE_CHECKING:
    from collections.abc import Iterable

    from ..converters import ConverterRegistry
    from ..introspection import FieldDescriptor
    from ..ports import EntitySet
    from .results import ApplyResult

log = logging.getLogger(__name__)


def reconcile_into_store[T](
    entity_type: type[T],
    entities: Iterable[T],
    *,
    entity_set: EntitySet[T],
    policy: DuplicatePolicy,
    converters: ConverterRegistry,
    result: ApplyResult,
) -> dict[object, T]:
    """Apply one type's batch to ``entity_set`` and return the applied entities by key.

    Any fault raised for an entity aborts the batch as :class:`ApplyError`.
    """

    entities = list(entities)
    batch = _Batch(
        entity_type,
        entity_set=entity_set,
        policy=policy,
        fields=persistable_fields(describe(entity_type), converters),
        result=result,
        declared=_declared_keys(entity_type, entities),
    )
    for entity in entities:
        try:
            batch.apply(entity)
        except Exception as exc:
            raise ApplyError(entity_type, exc) from exc
    return batch.applied


def _declared_keys(entity_type: type, entities: Iterable[object]) -> frozenset[object]:
    primary_key = find_primary_key(entity_type)
    if primary_key is None:
        return frozenset()
    keys = (getattr(entity, primary_key.name, None) for entity in entities)
    return frozenset(key for key in keys if key is not None)


class _Batch[T]:
    def __init__(
        self,
        entity_type: type[T],
        *,
        entity_set: EntitySet[T],
        policy: DuplicatePolicy,
        fields: tuple[FieldDescriptor, ...],
        result: ApplyResult,
        declared: frozenset[object] = frozenset(),
    ) -> None:
        self.entity_type = entity_type
        self.entity_set = entity_set
        self.policy = policy
        self.fields = fields
        self.result = result
        self.applied: dict[object, T] = {}
        # keys set on members of the batch; never handed out to a re-keyed duplicate
        self.declared = declared

    def apply(self, entity: T) -> None:
        primary_key = require_primary_key(self.entity_type)
        key = getattr(entity, primary_key.name, None)
        if key is None:
            # the store assigns the key
            self._add(entity, key)
            return

        earlier = self.applied.get(key)
        if earlier is entity:
            return
        if earlier is not None:
            self._resolve_collision(entity, earlier, primary_key, key, stored=False)
            return

        existing = self.entity_set.find(key)
        if existing is None or existing is entity:
            self._add(entity, key)
            return
        self._resolve_collision(entity, existing, primary_key, key, stored=True)

    def _resolve_collision(
        self,
        entity: T,
        existing: T,
        primary_key: FieldDescriptor,
        key: object,
        *,
        stored: bool,
    ) -> None:
        name = self.entity_type.__name__
        match self.policy:
            case DuplicatePolicy.HALT:
                if not self._same_values(existing, entity):
                    raise KeyCollisionError(entity_type=self.entity_type, key=key, stored=stored)
                log.debug("%s %r repeated with identical values", name, key)
                self.applied[key] = existing
                self.result.unchanged += 1
            case DuplicatePolicy.MERGE:
                self._copy_values(entity, existing, primary_key)
                self.entity_set.update(existing)
                self.applied[key] = existing
                self.result.merged += 1
                source = "stored" if stored else "earlier"
                log.debug("Merged %s %r into the %s record", name, key, source)
            case DuplicatePolicy.SKIP:
                self.applied.setdefault(key, existing)
                self.result.skipped += 1
                log.debug("Skipped duplicate %s %r", name, key)
            case DuplicatePolicy.ALWAYS_ADD:
                new_key = synthesize_key(
                    key,
                    entity_type=self.entity_type,
                    is_taken=self._is_taken,
                )
                setattr(entity, primary_key.name, new_key)
                self._add(entity, new_key)
                self.result.rekeyed += 1
                log.info("Re-keyed duplicate %s %r to %r", name, key, new_key)

    def _add(self, entity: T, key: object) -> None:
        self.entity_set.add(entity)
        if key is not None:
            self.applied[key] = entity
        self.result.added += 1

    def _is_taken(self, candidate: object) -> bool:
        if candidate in self.declared or candidate in self.applied:
            return True
        return self.entity_set.find(candidate) is not None

    def _same_values(self, left: T, right: T) -> bool:
        return all(
            getattr(left, field.name, None) == getattr(right, field.name, None)
            for field in self.fields
        )

    def _copy_values(self, source: T, target: T, primary_key: FieldDescriptor) -> None:
        for field in self.fields:
            if field.name == primary_key.name:
                continue
            setattr(target, field.name, getattr(source, field.name, None))
