from __future__ import annotations

from importlib import metadata

from .app import seed_database
from .domain import (
    ApplyError,
    ApplyResult,
    ConverterRegistry,
    DuplicatePolicy,
    EntitySeeder,
    EntitySerializable,
    ForeignKey,
    InverseOf,
    KeyCollisionError,
    SeedingError,
    SeedResult,
    foreign_key,
    inverse_of,
)

try:
    __version__ = metadata.version("seedgraph")
except metadata.PackageNotFoundError:
    __version__ = "0.0.0+local"

__all__ = [
    "ApplyError",
    "ApplyResult",
    "ConverterRegistry",
    "DuplicatePolicy",
    "EntitySeeder",
    "EntitySerializable",
    "ForeignKey",
    "InverseOf",
    "KeyCollisionError",
    "SeedResult",
    "SeedingError",
    "__version__",
    "foreign_key",
    "inverse_of",
    "seed_database",
]
