"""Entry point tying registration, reconciliation and extraction together."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from .converters import ConverterRegistry
from .errors import ApplyError, MissingArgumentError
from .extraction import SeedExtractor
from .ordering import dependency_order, parents_first
from .policy import DuplicatePolicy
from .reconciliation import ApplyResult, SeedResult, collapse_duplicates, reconcile_into_store
from .registry import TypeRegistry
from .scanner import GraphScanner

if TYPE_CHECKING:
    from collections.abc import Iterable

    from .converters import Converter
    from .ports import DeclarativeSink, LiveStore

log = logging.getLogger(__name__)


class EntitySeeder:
    """Collects entity graphs and pushes them into a store or a declarative sink.

    Usage::

        seeder = EntitySeeder(DuplicatePolicy.MERGE)
        seeder.register(book)  # also registers book.category, book.publisher, ...
        seeder.apply_to_store(store)

    Registered entities keep their foreign keys filled from the related entities'
    primary keys as seen at registration time.
    """

    def __init__(
        self,
        policy: DuplicatePolicy | str = DuplicatePolicy.HALT,
        *,
        converters: ConverterRegistry | None = None,
    ) -> None:
        self.policy = policy
        self._converters = converters if converters is not None else ConverterRegistry()
        self._registry = TypeRegistry()
        self._scanner = GraphScanner(self._registry, self._converters)
        self._extractor = SeedExtractor(self._converters)

    @property
    def policy(self) -> DuplicatePolicy:
        return self._policy

    @policy.setter
    def policy(self, value: DuplicatePolicy | str) -> None:
        self._policy = DuplicatePolicy.parse(value)

    @property
    def converters(self) -> ConverterRegistry:
        return self._converters

    # --- Registration ---------------------------------------------------------

    def register[T](self, entity: T) -> T:
        if entity is None:
            raise MissingArgumentError("entity")
        self._scanner.register(entity)
        return entity

    def register_all[T](self, entities: Iterable[T]) -> list[T]:
        if entities is None:
            raise MissingArgumentError("entities")
        return [self.register(entity) for entity in entities]

    def entities[T](self, entity_type: type[T]) -> tuple[T, ...]:
        return self._registry.get(entity_type)

    @property
    def entity_types(self) -> tuple[type, ...]:
        return self._registry.entity_types

    def __len__(self) -> int:
        return len(self._registry)

    def register_converter(self, value_type: type, converter: Converter) -> None:
        self._converters.register(value_type, converter)

    def clear(self) -> None:
        """Forget registered entities and the visited set; converters are kept."""

        self._scanner.reset()

    # --- Extraction -----------------------------------------------------------

    def seed_data(self, entity_type: type) -> list[dict[str, object]]:
        return self._extractor.field_maps(self._registry.get(entity_type))

    def seed_entities[T](self, entity_type: type[T]) -> list[T]:
        return self._extractor.materialize_all(self._registry.get(entity_type))

    # --- Application ----------------------------------------------------------

    def apply_to_store(self, store: LiveStore) -> ApplyResult:
        """Reconcile every registered type into ``store``, referenced types first.

        Pending additions are flushed after each type so rows holding a foreign key
        follow the rows they point at. Types the store has no entity set for are
        skipped. Raises :class:`ApplyError` on the first entity that cannot be
        applied.
        """

        if store is None:
            raise MissingArgumentError("store")
        result = ApplyResult()
        for entity_type in dependency_order(self._registry.entity_types, self._converters):
            entity_set = store.entity_set(entity_type)
            if entity_set is None:
                log.debug("Store has no entity set for %s; skipping", entity_type.__name__)
                result.ignored_types.append(entity_type)
                continue
            reconcile_into_store(
                entity_type,
                parents_first(entity_type, self._registry.get(entity_type)),
                entity_set=entity_set,
                policy=self._policy,
                converters=self._converters,
                result=result,
            )
            try:
                store.flush()
            except Exception as exc:
                raise ApplyError(entity_type, exc) from exc
        log.info(
            "Applied %d seed entities (policy=%s): added=%d merged=%d skipped=%d rekeyed=%d "
            "unchanged=%d",
            result.processed,
            self._policy.value,
            result.added,
            result.merged,
            result.skipped,
            result.rekeyed,
            result.unchanged,
        )
        return result

    def apply_to_sink(self, sink: DeclarativeSink) -> SeedResult:
        """Hand one collapsed, materialized batch per registered type to ``sink``.

        Batches arrive referenced types first, as for :meth:`apply_to_store`.
        """

        if sink is None:
            raise MissingArgumentError("sink")
        result = SeedResult()
        for entity_type in dependency_order(self._registry.entity_types, self._converters):
            entities = self._registry.get(entity_type)
            if not entities:
                continue
            try:
                batch = parents_first(
                    entity_type, collapse_duplicates(entity_type, entities, self._policy)
                )
                records = self._extractor.materialize_all(batch)
                sink.seed(entity_type, records)
            except Exception as exc:
                raise ApplyError(entity_type, exc, stage="sink") from exc
            result.batches += 1
            result.records += len(records)
            result.collapsed += len(entities) - len(batch)
        log.info(
            "Seeded %d record(s) in %d batch(es); %d duplicate(s) collapsed",
            result.records,
            result.batches,
            result.collapsed,
        )
        return result
