"""Primary-key and foreign-key discovery by naming convention and metadata."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from .errors import PrimaryKeyNotFoundError
from .introspection import FieldKind, describe, is_key_field, snake_case

if TYPE_CHECKING:
    from .introspection import FieldDescriptor, TypeDescriptor

log = logging.getLogger(__name__)


def find_primary_key(entity_type: type) -> FieldDescriptor | None:
    """Return the ``id`` or ``<snake_type>_id`` field of ``entity_type``, if key-typed."""

    descriptor = describe(entity_type)
    for name in ("id", f"{descriptor.key_prefix}_id"):
        candidate = descriptor.field(name)
        if is_key_field(candidate):
            return candidate
    return None


def require_primary_key(entity_type: type) -> FieldDescriptor:
    primary_key = find_primary_key(entity_type)
    if primary_key is None:
        raise PrimaryKeyNotFoundError(entity_type)
    return primary_key


def primary_key_value(entity: object) -> object:
    """Read the primary-key value of ``entity``; raises when its type has no key field."""

    primary_key = require_primary_key(type(entity))
    return getattr(entity, primary_key.name, None)


def find_foreign_key(
    descriptor: TypeDescriptor,
    navigation: FieldDescriptor,
) -> FieldDescriptor | None:
    """Locate the scalar field on ``descriptor`` holding the key of ``navigation``.

    Resolution order:

    1. a field declared with ``foreign_key(navigation.name)``
    2. ``<navigation>_id``
    3. ``<snake referenced type>_id``
    4. when a collection on the same type declares ``inverse_of(navigation.name)``,
       the only ``_id`` key field other than the primary key
    """

    for candidate in descriptor.fields:
        if candidate.foreign_key_for == navigation.name and candidate.kind is FieldKind.SCALAR:
            return candidate

    names = [f"{navigation.name}_id"]
    if navigation.value_type is not None:
        names.append(f"{snake_case(navigation.value_type.__name__)}_id")
    for name in names:
        candidate = descriptor.field(name)
        if is_key_field(candidate):
            return candidate

    if any(field.inverse_of == navigation.name for field in descriptor.collections):
        id_fields = _id_fields(descriptor)
        if len(id_fields) == 1:
            return id_fields[0]
    return None


def find_back_references(
    child_descriptor: TypeDescriptor,
    parent: object,
    collection: FieldDescriptor,
    *,
    child: object | None = None,
) -> tuple[FieldDescriptor, ...]:
    """Return the reference fields of a collection item that should point at ``parent``.

    A declared ``inverse_of`` on the collection names the field directly. Otherwise
    every reference field typed for the parent is a candidate; candidates already
    holding ``parent`` win, and a single candidate is used. Several unrelated
    candidates are left alone.
    """

    if collection.inverse_of is not None:
        declared = child_descriptor.field(collection.inverse_of)
        if declared is not None and declared.kind is FieldKind.REFERENCE:
            return (declared,)
        log.debug(
            "%s has no reference field %r named by %s",
            child_descriptor.name,
            collection.inverse_of,
            collection.name,
        )
        return ()

    candidates = tuple(
        field
        for field in child_descriptor.references
        if field.value_type is not None and isinstance(parent, field.value_type)
    )
    if child is not None:
        holding = tuple(field for field in candidates if getattr(child, field.name, None) is parent)
        if holding:
            return holding
    if len(candidates) == 1:
        return candidates
    if candidates:
        log.debug(
            "Ambiguous back-references on %s for %s: %s",
            child_descriptor.name,
            type(parent).__name__,
            ", ".join(field.name for field in candidates),
        )
    return ()


def find_inverse_foreign_key(
    child_descriptor: TypeDescriptor,
    parent_type: type,
    collection: FieldDescriptor,
) -> FieldDescriptor | None:
    """Locate the key field of a collection item that has no back-reference field."""

    inverse = collection.inverse_of
    if inverse is not None:
        for candidate in child_descriptor.fields:
            if candidate.foreign_key_for == inverse and candidate.kind is FieldKind.SCALAR:
                return candidate
        candidate = child_descriptor.field(f"{inverse}_id")
        if is_key_field(candidate):
            return candidate

    candidate = child_descriptor.field(f"{snake_case(parent_type.__name__)}_id")
    if is_key_field(candidate):
        return candidate

    claimed = {
        foreign_key.name
        for navigation in child_descriptor.references
        if (foreign_key := find_foreign_key(child_descriptor, navigation)) is not None
    }
    remaining = [field for field in _id_fields(child_descriptor) if field.name not in claimed]
    if len(remaining) == 1:
        return remaining[0]
    return None


def _id_fields(descriptor: TypeDescriptor) -> list[FieldDescriptor]:
    primary_key = find_primary_key(descriptor.entity_type)
    return [
        field
        for field in descriptor.fields
        if field.is_id_shaped and (primary_key is None or field.name != primary_key.name)
    ]
