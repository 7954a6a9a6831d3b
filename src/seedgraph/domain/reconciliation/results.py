"""Summaries returned by the apply operations."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(slots=True)
class ApplyResult:
    """Summary of one push of the registry into a live store.

    ``unchanged`` counts ``HALT`` collisions whose values matched; ``ignored_types``
    lists registered types the store had no accessor for.
    """

    added: int = 0
    merged: int = 0
    skipped: int = 0
    rekeyed: int = 0
    unchanged: int = 0
    ignored_types: list[type] = field(default_factory=list)

    @property
    def processed(self) -> int:
        return self.added + self.merged + self.skipped + self.unchanged


@dataclass(slots=True)
class SeedResult:
    """Summary of one hand-off of materialized batches to a declarative sink."""

    batches: int = 0
    records: int = 0
    collapsed: int = 0
