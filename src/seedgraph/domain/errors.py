"""Error hierarchy raised by the seeder core."""

from __future__ import annotations


def _type_name(entity_type: type) -> str:
    return getattr(entity_type, "__name__", repr(entity_type))


class SeedingError(Exception):
    """Base class for every error raised by seedgraph."""


class MissingArgumentError(SeedingError, ValueError):
    """Raised when a required entity, store, or sink argument is ``None``."""

    def __init__(self, argument: str) -> None:
        self.argument = argument
        super().__init__(f"{argument} must not be None")


class PrimaryKeyNotFoundError(SeedingError, LookupError):
    """Raised when a type has no field matching the primary-key convention."""

    def __init__(self, entity_type: type) -> None:
        self.entity_type = entity_type
        super().__init__(f"Could not find primary key for type {_type_name(entity_type)}")


class KeyCollisionError(SeedingError):
    """Raised under ``HALT`` when two records share a key but differ in values."""

    def __init__(self, *, entity_type: type, key: object, stored: bool) -> None:
        self.entity_type = entity_type
        self.key = key
        self.stored = stored
        where = "already exists in the store" if stored else "is already being applied"
        super().__init__(
            f"An entity of type {_type_name(entity_type)} with key {key!r} "
            f"but different values {where}"
        )


class KeySynthesisExhaustedError(SeedingError):
    """Raised when ``ALWAYS_ADD`` cannot find a free key for a colliding record."""

    def __init__(self, *, entity_type: type, key: object, attempts: int) -> None:
        self.entity_type = entity_type
        self.key = key
        self.attempts = attempts
        super().__init__(
            f"Could not generate a unique key for {_type_name(entity_type)} "
            f"starting from {key!r} after {attempts} attempts"
        )


class FieldAssignmentError(SeedingError):
    """Raised when a required field cannot be written during materialization."""

    def __init__(self, *, entity_type: type, field_name: str) -> None:
        self.entity_type = entity_type
        self.field_name = field_name
        super().__init__(f"Could not assign {_type_name(entity_type)}.{field_name}")


class MaterializationError(SeedingError):
    """Raised when a blank seed instance of a type cannot be constructed."""

    def __init__(self, entity_type: type) -> None:
        self.entity_type = entity_type
        super().__init__(f"Could not construct a seed instance of {_type_name(entity_type)}")


class ApplyError(SeedingError):
    """Wraps any fault raised while applying one type's batch.

    The original exception is chained as ``__cause__``.
    """

    def __init__(self, entity_type: type, cause: BaseException, *, stage: str = "store") -> None:
        self.entity_type = entity_type
        self.stage = stage
        if stage == "sink":
            prefix = f"Error applying seed data for entity type {_type_name(entity_type)}"
        else:
            prefix = f"Error processing entity of type {_type_name(entity_type)}"
        super().__init__(f"{prefix}: {cause}")
