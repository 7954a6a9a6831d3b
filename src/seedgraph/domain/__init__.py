"""Graph scanning, relationship discovery, reconciliation and extraction."""

from __future__ import annotations

from .converters import ConverterRegistry, EntitySerializable
from .errors import (
    ApplyError,
    FieldAssignmentError,
    KeyCollisionError,
    KeySynthesisExhaustedError,
    MaterializationError,
    MissingArgumentError,
    PrimaryKeyNotFoundError,
    SeedingError,
)
from .metadata import ForeignKey, InverseOf, foreign_key, inverse_of
from .policy import DuplicatePolicy
from .reconciliation import ApplyResult, SeedResult
from .seeder import EntitySeeder

__all__ = [
    "ApplyError",
    "ApplyResult",
    "ConverterRegistry",
    "DuplicatePolicy",
    "EntitySeeder",
    "EntitySerializable",
    "FieldAssignmentError",
    "ForeignKey",
    "InverseOf",
    "KeyCollisionError",
    "KeySynthesisExhaustedError",
    "MaterializationError",
    "MissingArgumentError",
    "PrimaryKeyNotFoundError",
    "SeedResult",
    "SeedingError",
    "foreign_key",
    "inverse_of",
]
