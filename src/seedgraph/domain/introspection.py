"""Per-type field descriptors computed from annotations.

Every entity type is described once: each public field is classified as scalar,
single reference, collection, or other, and the classification is cached. The
scanner, reconciler, and extractor only ever consult these descriptors, never the
raw annotations.
"""

from __future__ import annotations

import dataclasses
import inspect
import logging
import re
import sys
import types
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from datetime import date, time, timedelta
from decimal import Decimal
from enum import Enum, StrEnum
from fractions import Fraction
from functools import cache
from typing import (
    Annotated,
    Any,
    ClassVar,
    Final,
    Literal,
    Union,
    get_args,
    get_origin,
    get_type_hints,
)
from uuid import UUID

from .metadata import FOREIGN_KEY_METADATA, INVERSE_OF_METADATA, ForeignKey, InverseOf

log = logging.getLogger(__name__)

# datetime is covered through date; IntEnum/StrEnum through Enum
SCALAR_TYPES: Final[tuple[type, ...]] = (
    bool,
    int,
    float,
    complex,
    str,
    bytes,
    Decimal,
    Fraction,
    date,
    time,
    timedelta,
    UUID,
    Enum,
)
KEY_TYPES: Final[tuple[type, ...]] = (int, str, UUID)

_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])|(?<=[A-Z])(?=[A-Z][a-z])")


def snake_case(name: str) -> str:
    """Convert ``MemberProfile`` to ``member_profile``; snake_case input is unchanged."""

    return _CAMEL_BOUNDARY.sub("_", name).lower()


class FieldKind(StrEnum):
    SCALAR = "scalar"
    REFERENCE = "reference"
    COLLECTION = "collection"
    OTHER = "other"


@dataclass(frozen=True, slots=True)
class FieldDescriptor:
    """Classification of one entity field.

    ``value_type`` is the unwrapped scalar type, the referenced class, or the
    collection's element type (``None`` when the element type is not declared).
    ``container_type`` is the collection's own class (``list``, ``set``...).
    """

    name: str
    kind: FieldKind
    value_type: type | None = None
    container_type: type | None = None
    nullable: bool = False
    required: bool = False
    foreign_key_for: str | None = None
    inverse_of: str | None = None

    @property
    def is_key_typed(self) -> bool:
        return self.kind is FieldKind.SCALAR and self.value_type in KEY_TYPES

    @property
    def is_id_shaped(self) -> bool:
        return self.is_key_typed and self.name.endswith("_id")


@dataclass(frozen=True, slots=True)
class TypeDescriptor:
    entity_type: type
    fields: tuple[FieldDescriptor, ...]
    is_dataclass: bool = False

    @property
    def name(self) -> str:
        return self.entity_type.__name__

    @property
    def key_prefix(self) -> str:
        return snake_case(self.name)

    def field(self, name: str) -> FieldDescriptor | None:
        for candidate in self.fields:
            if candidate.name == name:
                return candidate
        return None

    @property
    def scalars(self) -> tuple[FieldDescriptor, ...]:
        return tuple(f for f in self.fields if f.kind is FieldKind.SCALAR)

    @property
    def references(self) -> tuple[FieldDescriptor, ...]:
        return tuple(f for f in self.fields if f.kind is FieldKind.REFERENCE)

    @property
    def collections(self) -> tuple[FieldDescriptor, ...]:
        return tuple(f for f in self.fields if f.kind is FieldKind.COLLECTION)


def is_key_field(field: FieldDescriptor | None) -> bool:
    return field is not None and field.is_key_typed


@cache
def describe(entity_type: type) -> TypeDescriptor:
    """Return the cached descriptor of ``entity_type``."""

    hints = _type_hints(entity_type)
    if dataclasses.is_dataclass(entity_type):
        fields = tuple(
            _describe_dataclass_field(field, hints)
            for field in dataclasses.fields(entity_type)
            if not field.name.startswith("_")
        )
        descriptor = TypeDescriptor(entity_type=entity_type, fields=fields, is_dataclass=True)
    else:
        fields = tuple(
            _describe_plain_field(entity_type, name, hint)
            for name, hint in hints.items()
            if not name.startswith("_") and not _is_class_var(hint)
        )
        descriptor = TypeDescriptor(entity_type=entity_type, fields=fields)

    log.debug(
        "Described %s: %s",
        descriptor.name,
        ", ".join(f"{field.name}={field.kind.value}" for field in descriptor.fields),
    )
    return descriptor


def _type_hints(entity_type: type) -> dict[str, Any]:
    try:
        return get_type_hints(entity_type, include_extras=True)
    except (NameError, TypeError) as exc:
        log.debug("Resolving annotations of %s one by one: %s", entity_type.__name__, exc)

    hints: dict[str, Any] = {}
    for klass in reversed(entity_type.__mro__):
        module = sys.modules.get(klass.__module__)
        globalns = dict(vars(module)) if module is not None else {}
        globalns.setdefault(klass.__name__, klass)
        for name, annotation in inspect.get_annotations(klass).items():
            hints[name] = _resolve_annotation(entity_type, name, annotation, globalns)
    return hints


def _resolve_annotation(
    entity_type: type,
    name: str,
    annotation: Any,
    globalns: dict[str, Any],
) -> Any:
    if not isinstance(annotation, str):
        return annotation
    try:
        return eval(annotation, globalns)  # noqa: S307
    except (AttributeError, NameError, SyntaxError, TypeError) as exc:
        # left as a string, which classifies as OTHER
        log.warning(
            "Could not resolve annotation of %s.%s: %s", entity_type.__name__, name, exc
        )
        return annotation


def _describe_dataclass_field(
    field: dataclasses.Field[Any],
    hints: dict[str, Any],
) -> FieldDescriptor:
    hint = hints.get(field.name, field.type)
    required = (
        field.default is dataclasses.MISSING and field.default_factory is dataclasses.MISSING
    )
    kind, value_type, container_type, nullable, extras = _classify(hint)
    foreign_key_for = field.metadata.get(FOREIGN_KEY_METADATA) or _marker(extras, ForeignKey)
    inverse = field.metadata.get(INVERSE_OF_METADATA) or _marker(extras, InverseOf)
    return FieldDescriptor(
        name=field.name,
        kind=kind,
        value_type=value_type,
        container_type=container_type,
        nullable=nullable,
        required=required,
        foreign_key_for=foreign_key_for,
        inverse_of=inverse,
    )


def _describe_plain_field(entity_type: type, name: str, hint: Any) -> FieldDescriptor:
    kind, value_type, container_type, nullable, extras = _classify(hint)
    return FieldDescriptor(
        name=name,
        kind=kind,
        value_type=value_type,
        container_type=container_type,
        nullable=nullable,
        required=not hasattr(entity_type, name),
        foreign_key_for=_marker(extras, ForeignKey),
        inverse_of=_marker(extras, InverseOf),
    )


def _marker(extras: tuple[object, ...], marker_type: type[ForeignKey | InverseOf]) -> str | None:
    for extra in extras:
        if isinstance(extra, marker_type):
            return extra.navigation
    return None


def _is_class_var(hint: Any) -> bool:
    return hint is ClassVar or get_origin(hint) is ClassVar


def _strip_annotated(hint: Any) -> tuple[Any, tuple[object, ...]]:
    if get_origin(hint) is Annotated:
        base, *extras = get_args(hint)
        return base, tuple(extras)
    return hint, ()


def _is_union(hint: Any) -> bool:
    origin = get_origin(hint)
    return origin is Union or origin is types.UnionType


type _Classification = tuple[FieldKind, type | None, type | None, bool, tuple[object, ...]]


def _classify(hint: Any) -> _Classification:
    hint, extras = _strip_annotated(hint)
    nullable = False
    if _is_union(hint):
        members = get_args(hint)
        non_null = [member for member in members if member is not type(None)]
        nullable = len(non_null) < len(members)
        if len(non_null) != 1:
            return FieldKind.OTHER, None, None, nullable, extras
        hint, more_extras = _strip_annotated(non_null[0])
        extras += more_extras

    origin = get_origin(hint)
    if origin is Literal:
        literal_values = get_args(hint)
        literal_type = type(literal_values[0]) if literal_values else None
        return FieldKind.SCALAR, literal_type, None, nullable, extras

    if origin is not None:
        if not isinstance(origin, type) or issubclass(origin, Mapping):
            return FieldKind.OTHER, None, None, nullable, extras
        if issubclass(origin, Iterable) and not issubclass(origin, (str, bytes)):
            element = _element_type(get_args(hint))
            return FieldKind.COLLECTION, element, origin, nullable, extras
        return FieldKind.REFERENCE, origin, None, nullable, extras

    if hint is Any or not isinstance(hint, type) or hint in (object, type(None)):
        return FieldKind.OTHER, None, None, nullable, extras
    if issubclass(hint, SCALAR_TYPES):
        return FieldKind.SCALAR, hint, None, nullable, extras
    if issubclass(hint, Mapping):
        return FieldKind.OTHER, None, None, nullable, extras
    if issubclass(hint, Iterable):
        return FieldKind.COLLECTION, None, hint, nullable, extras
    return FieldKind.REFERENCE, hint, None, nullable, extras


def _element_type(args: tuple[Any, ...]) -> type | None:
    if not args:
        return None
    element, _ = _strip_annotated(args[0])
    if _is_union(element):
        non_null = [member for member in get_args(element) if member is not type(None)]
        element = non_null[0] if len(non_null) == 1 else None
    origin = get_origin(element)
    if origin is not None:
        element = origin
    return element if isinstance(element, type) else None
