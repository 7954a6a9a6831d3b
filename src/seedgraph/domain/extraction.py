"""Reduce registered entities to their persistable form.

Two shapes are produced: plain field maps (scalars and foreign keys, converter
values as strings) and fresh typed instances that carry the same fields while
leaving every reference empty. Declarative sinks consume the latter.
"""

from __future__ import annotations

import dataclasses
import logging
from typing import TYPE_CHECKING, Any

from .converters import ConverterRegistry
from .errors import FieldAssignmentError, MaterializationError
from .introspection import FieldKind, describe

if TYPE_CHECKING:
    from collections.abc import Iterable

    from .introspection import FieldDescriptor, TypeDescriptor

log = logging.getLogger(__name__)

_FIELD_ERRORS = (AttributeError, LookupError, TypeError, ValueError)


def persistable_fields(
    descriptor: TypeDescriptor,
    converters: ConverterRegistry,
) -> tuple[FieldDescriptor, ...]:
    """Scalar fields plus reference fields whose type has a converter."""

    return tuple(
        field
        for field in descriptor.fields
        if field.kind is FieldKind.SCALAR
        or (field.kind is FieldKind.REFERENCE and converters.handles(field.value_type))
    )


class SeedExtractor:
    def __init__(self, converters: ConverterRegistry | None = None) -> None:
        self._converters = converters if converters is not None else ConverterRegistry()

    def field_map(self, entity: object) -> dict[str, object]:
        """Return the non-``None`` persistable values of ``entity`` in declaration order."""

        descriptor = describe(type(entity))
        row: dict[str, object] = {}
        for field in persistable_fields(descriptor, self._converters):
            try:
                value = getattr(entity, field.name, None)
                if value is None:
                    continue
                row[field.name] = self._converters.convert(value)
            except _FIELD_ERRORS as exc:
                log.warning("Skipping %s.%s: %s", descriptor.name, field.name, exc)
        return row

    def field_maps(self, entities: Iterable[object]) -> list[dict[str, object]]:
        return [self.field_map(entity) for entity in entities]

    def materialize[T](self, entity: T) -> T:
        """Build a new instance of ``type(entity)`` holding only its persistable fields.

        Dataclasses go through ``__init__``; required reference fields receive ``None``
        and required collections an empty container. Other classes are instantiated
        without arguments and assigned field by field.
        """

        entity_type = type(entity)
        descriptor = describe(entity_type)
        values = self._persistable_values(entity, descriptor)
        if dataclasses.is_dataclass(entity_type):
            clone = self._build_dataclass(entity_type, descriptor, values)
        else:
            try:
                clone = entity_type()
            except Exception as exc:
                raise MaterializationError(entity_type) from exc
            for name, value in values.items():
                self._assign(clone, descriptor.field(name), name, value)
        log.debug("Materialized %s with %s", descriptor.name, ", ".join(values))
        return clone

    def materialize_all[T](self, entities: Iterable[T]) -> list[T]:
        return [self.materialize(entity) for entity in entities]

    def _persistable_values(self, entity: object, descriptor: TypeDescriptor) -> dict[str, Any]:
        # foreign keys are scalar fields, whatever their name
        values: dict[str, Any] = {}
        for field in persistable_fields(descriptor, self._converters):
            try:
                values[field.name] = getattr(entity, field.name, None)
            except _FIELD_ERRORS as exc:
                log.warning("Skipping %s.%s: %s", descriptor.name, field.name, exc)
        return values

    def _build_dataclass[T](
        self,
        entity_type: type[T],
        descriptor: TypeDescriptor,
        values: dict[str, Any],
    ) -> T:
        kwargs: dict[str, Any] = {}
        deferred: dict[str, Any] = {}
        for field in dataclasses.fields(entity_type):  # type: ignore[arg-type]
            if field.name in values:
                target = kwargs if field.init else deferred
                target[field.name] = values[field.name]
            elif field.init and _has_no_default(field):
                kwargs[field.name] = _empty_value(descriptor.field(field.name))

        try:
            clone = entity_type(**kwargs)
        except Exception as exc:
            raise MaterializationError(entity_type) from exc
        for name, value in deferred.items():
            self._assign(clone, descriptor.field(name), name, value)
        return clone

    @staticmethod
    def _assign(
        clone: object,
        field: FieldDescriptor | None,
        name: str,
        value: object,
    ) -> None:
        try:
            setattr(clone, name, value)
        except _FIELD_ERRORS as exc:
            if field is not None and field.required:
                raise FieldAssignmentError(entity_type=type(clone), field_name=name) from exc
            log.warning("Could not assign %s.%s: %s", type(clone).__name__, name, exc)


def _has_no_default(field: dataclasses.Field[Any]) -> bool:
    return field.default is dataclasses.MISSING and field.default_factory is dataclasses.MISSING


def _empty_value(field: FieldDescriptor | None) -> object:
    if field is None or field.kind is not FieldKind.COLLECTION or field.container_type is None:
        return None
    try:
        return field.container_type()
    except TypeError:
        # abstract containers such as Sequence or Iterable
        return []
