"""Custom scalar converters used when extracting seed data."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

from .errors import MissingArgumentError

if TYPE_CHECKING:
    from collections.abc import Callable

log = logging.getLogger(__name__)

type Converter = Callable[[Any], str]


@runtime_checkable
class EntitySerializable(Protocol):
    """Value objects that persist as a single string column."""

    def to_entity_string(self) -> str: ...


def _to_entity_string(value: EntitySerializable) -> str:
    return value.to_entity_string()


class ConverterRegistry:
    """Maps value types to functions producing their persisted string form.

    Lookups walk the value type's MRO, so a converter registered for a base class
    covers its subclasses. Types implementing ``to_entity_string`` are converted
    without registration.
    """

    def __init__(self) -> None:
        self._converters: dict[type, Converter] = {}

    def register(self, value_type: type, converter: Converter) -> None:
        if value_type is None:
            raise MissingArgumentError("value_type")
        if converter is None:
            raise MissingArgumentError("converter")
        self._converters[value_type] = converter
        log.debug("Registered converter for %s", value_type.__name__)

    def converter_for(self, value_type: type | None) -> Converter | None:
        if value_type is None:
            return None
        for klass in value_type.__mro__:
            converter = self._converters.get(klass)
            if converter is not None:
                return converter
        if callable(getattr(value_type, "to_entity_string", None)):
            return _to_entity_string
        return None

    def handles(self, value_type: type | None) -> bool:
        return self.converter_for(value_type) is not None

    def convert(self, value: object) -> object:
        """Return the converted form of ``value``, or ``value`` itself when no converter applies."""

        converter = self.converter_for(type(value))
        return value if converter is None else converter(value)

    def __len__(self) -> int:
        return len(self._converters)
