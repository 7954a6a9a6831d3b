"""Walk entity graphs, registering every reachable entity and filling foreign keys.

Traversal visits fields in declaration order and registers each related entity
right after its key is written, descending into it before moving on to the next
field. The walk is driven by an explicit stack of per-entity generators, so
deeply nested graphs do not depend on the interpreter's recursion limit.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import TYPE_CHECKING

from .converters import ConverterRegistry
from .errors import MissingArgumentError
from .introspection import SCALAR_TYPES, FieldKind, describe
from .relationships import (
    find_back_references,
    find_foreign_key,
    find_inverse_foreign_key,
    find_primary_key,
)

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator

    from .introspection import FieldDescriptor, TypeDescriptor
    from .registry import TypeRegistry

log = logging.getLogger(__name__)


class GraphScanner:
    def __init__(self, registry: TypeRegistry, converters: ConverterRegistry | None = None) -> None:
        self._registry = registry
        self._converters = converters if converters is not None else ConverterRegistry()
        # id -> entity; holding the entity keeps its id from being reused
        self._visited: dict[int, object] = {}

    def register(self, entity: object) -> bool:
        """Register ``entity`` and everything reachable from it.

        Returns ``True`` when ``entity`` itself was not registered before. Foreign keys
        on traversed edges are written even when the far end was already visited.
        """

        if entity is None:
            raise MissingArgumentError("entity")
        added = self._registry.add(entity)
        self._scan(entity)
        return added

    def register_all[T](self, entities: Iterable[T]) -> list[T]:
        if entities is None:
            raise MissingArgumentError("entities")
        registered: list[T] = []
        for entity in entities:
            self.register(entity)
            registered.append(entity)
        return registered

    def reset(self) -> None:
        self._registry.clear()
        self._visited.clear()

    def _scan(self, root: object) -> None:
        if id(root) in self._visited:
            return
        self._visited[id(root)] = root
        stack: list[Iterator[object]] = [self._walk(root)]
        while stack:
            try:
                related = next(stack[-1])
            except StopIteration:
                stack.pop()
                continue
            self._registry.add(related)
            if id(related) in self._visited:
                continue
            self._visited[id(related)] = related
            stack.append(self._walk(related))

    def _walk(self, entity: object) -> Iterator[object]:
        """Yield related entities of ``entity`` in the order they must be registered."""

        descriptor = describe(type(entity))
        for field in descriptor.fields:
            if field.kind is FieldKind.REFERENCE:
                if self._converters.handles(field.value_type):
                    continue
                value = getattr(entity, field.name, None)
                if not self._is_entity(value):
                    continue
                self._assign_foreign_key(entity, descriptor, field, value)
                yield value
            elif field.kind is FieldKind.COLLECTION:
                if self._converters.handles(field.value_type):
                    continue
                collection = getattr(entity, field.name, None)
                if collection is None or isinstance(collection, (str, bytes, Mapping)):
                    continue
                items = [item for item in collection if self._is_entity(item)]
                for item in items:
                    self._link_back(item, entity, field)
                yield from items

    def _is_entity(self, value: object) -> bool:
        if value is None or isinstance(value, (*SCALAR_TYPES, Mapping)):
            return False
        return not self._converters.handles(type(value))

    def _assign_foreign_key(
        self,
        entity: object,
        descriptor: TypeDescriptor,
        navigation: FieldDescriptor,
        related: object,
    ) -> None:
        foreign_key = find_foreign_key(descriptor, navigation)
        if foreign_key is None:
            log.debug("No foreign key for %s.%s", descriptor.name, navigation.name)
            return
        primary_key = find_primary_key(type(related))
        if primary_key is None:
            log.debug(
                "%s has no primary key; %s.%s left unset",
                type(related).__name__,
                descriptor.name,
                foreign_key.name,
            )
            return
        self._write(entity, foreign_key.name, getattr(related, primary_key.name, None))

    def _link_back(self, item: object, parent: object, collection: FieldDescriptor) -> None:
        child_descriptor = describe(type(item))
        back_references = find_back_references(child_descriptor, parent, collection, child=item)
        for reference in back_references:
            if getattr(item, reference.name, None) is not parent:
                self._write(item, reference.name, parent)
            self._assign_foreign_key(item, child_descriptor, reference, parent)
        if back_references:
            return

        foreign_key = find_inverse_foreign_key(child_descriptor, type(parent), collection)
        primary_key = find_primary_key(type(parent))
        if foreign_key is None or primary_key is None:
            return
        self._write(item, foreign_key.name, getattr(parent, primary_key.name, None))

    @staticmethod
    def _write(target: object, name: str, value: object) -> None:
        try:
            setattr(target, name, value)
        except (AttributeError, TypeError, ValueError) as exc:
            log.warning("Could not set %s.%s: %s", type(target).__name__, name, exc)
            return
        log.debug("Set %s.%s", type(target).__name__, name)
