"""Domain port definitions for adapters."""

from __future__ import annotations

from .persistence import EntitySet, LiveStore
from .seeding import DeclarativeSink
from .unit_of_work import SeedUnitOfWork

__all__ = [
    "DeclarativeSink",
    "EntitySet",
    "LiveStore",
    "SeedUnitOfWork",
]
