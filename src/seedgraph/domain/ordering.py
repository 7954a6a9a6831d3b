"""Insert ordering derived from foreign keys.

Stores that enforce foreign keys need every referenced row to exist before the
row holding its key. Types are ordered so referenced types come first, and a
batch of a self-referencing type is ordered parents first. Registration order is
kept wherever the references allow it and wherever they form a cycle.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from .converters import ConverterRegistry
from .introspection import describe
from .relationships import find_foreign_key, find_inverse_foreign_key

if TYPE_CHECKING:
    from collections.abc import Iterator, Sequence

    from .introspection import FieldDescriptor

log = logging.getLogger(__name__)


def dependency_order(
    entity_types: Sequence[type],
    converters: ConverterRegistry | None = None,
) -> list[type]:
    """Return ``entity_types`` with every referenced type ahead of its referrers."""

    converters = converters if converters is not None else ConverterRegistry()
    dependencies: dict[type, set[type]] = {entity_type: set() for entity_type in entity_types}
    for entity_type in entity_types:
        for parent in _referenced_types(entity_type, entity_types, converters):
            dependencies[entity_type].add(parent)
        for child in _inverse_children(entity_type, entity_types, converters):
            dependencies[child].add(entity_type)

    ordered: list[type] = []
    placed: set[type] = set()
    remaining = list(entity_types)
    while remaining:
        ready = next((t for t in remaining if dependencies[t] <= placed), None)
        if ready is None:
            ready = remaining[0]
            log.debug(
                "Reference cycle among %s; keeping registration order for %s",
                ", ".join(t.__name__ for t in remaining),
                ready.__name__,
            )
        remaining.remove(ready)
        placed.add(ready)
        ordered.append(ready)
    return ordered


def parents_first[T](entity_type: type[T], entities: Sequence[T]) -> list[T]:
    """Order a batch so an entity referenced through a self-reference precedes its referrers."""

    navigations = _self_references(entity_type)
    if not navigations:
        return list(entities)

    members = {id(entity) for entity in entities}
    # id -> False while its parents are being placed, True once placed
    state: dict[int, bool] = {}
    ordered: list[T] = []
    for root in entities:
        if id(root) in state:
            continue
        state[id(root)] = False
        stack: list[tuple[T, Iterator[T]]] = [(root, _parents(root, navigations))]
        while stack:
            entity, parents = stack[-1]
            parent = next(parents, None)
            if parent is None:
                stack.pop()
                state[id(entity)] = True
                ordered.append(entity)
            elif id(parent) in members and id(parent) not in state:
                state[id(parent)] = False
                stack.append((parent, _parents(parent, navigations)))
    return ordered


def _referenced_types(
    entity_type: type,
    entity_types: Sequence[type],
    converters: ConverterRegistry,
) -> Iterator[type]:
    descriptor = describe(entity_type)
    for navigation in descriptor.references:
        target = navigation.value_type
        if target is None or converters.handles(target):
            continue
        if find_foreign_key(descriptor, navigation) is None:
            continue
        for candidate in entity_types:
            if candidate is not entity_type and issubclass(candidate, target):
                yield candidate


def _inverse_children(
    entity_type: type,
    entity_types: Sequence[type],
    converters: ConverterRegistry,
) -> Iterator[type]:
    """Yield item types of ``entity_type``'s collections keyed without a back-reference."""

    for collection in describe(entity_type).collections:
        element = collection.value_type
        if element is None or converters.handles(element):
            continue
        for candidate in entity_types:
            if candidate is entity_type or not issubclass(candidate, element):
                continue
            child_descriptor = describe(candidate)
            has_back_reference = any(
                field.value_type is not None and issubclass(entity_type, field.value_type)
                for field in child_descriptor.references
            )
            if has_back_reference:
                continue
            if find_inverse_foreign_key(child_descriptor, entity_type, collection) is not None:
                yield candidate


def _self_references(entity_type: type) -> tuple[FieldDescriptor, ...]:
    descriptor = describe(entity_type)
    return tuple(
        navigation
        for navigation in descriptor.references
        if navigation.value_type is not None
        and issubclass(entity_type, navigation.value_type)
        and find_foreign_key(descriptor, navigation) is not None
    )


def _parents[T](entity: T, navigations: tuple[FieldDescriptor, ...]) -> Iterator[T]:
    for navigation in navigations:
        parent = getattr(entity, navigation.name, None)
        if parent is not None:
            yield parent
