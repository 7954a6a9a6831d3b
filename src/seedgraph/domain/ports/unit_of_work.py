"""Unit-of-work boundary around a live store."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from types import TracebackType

    from .persistence import LiveStore


@runtime_checkable
class SeedUnitOfWork(Protocol):
    """Transaction scope exposing the store seeded entities are applied to."""

    @property
    def store(self) -> LiveStore: ...

    def __enter__(self) -> SeedUnitOfWork: ...

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> bool: ...

    def commit(self) -> None: ...

    def rollback(self) -> None: ...
