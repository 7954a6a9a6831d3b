"""Relationship annotations for entity fields.

Naming conventions cover most graphs (``category`` -> ``category_id``). These markers
pair fields explicitly where the names do not line up::

    @dataclass
    class Category:
        id: int = 0
        parent_id: int | None = foreign_key("parent_category", default=None)
        parent_category: Category | None = None
        sub_categories: list[Category] = inverse_of("parent_category")

Plain annotated classes use the same markers through ``typing.Annotated``::

    class Shelf:
        library_ref: Annotated[int, ForeignKey("library")] = 0
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Final

if TYPE_CHECKING:
    from collections.abc import Callable

FOREIGN_KEY_METADATA: Final[str] = "seedgraph.foreign_key"
INVERSE_OF_METADATA: Final[str] = "seedgraph.inverse_of"


@dataclass(frozen=True, slots=True)
class ForeignKey:
    """Marks a scalar field as the key of the reference field ``navigation``."""

    navigation: str


@dataclass(frozen=True, slots=True)
class InverseOf:
    """Marks a collection field whose items point back through ``navigation``."""

    navigation: str


def foreign_key(navigation: str, *, default: Any = 0, **kwargs: Any) -> Any:
    """Declare a dataclass field holding the key of reference field ``navigation``."""

    metadata = dict(kwargs.pop("metadata", None) or {})
    metadata[FOREIGN_KEY_METADATA] = navigation
    return dataclasses.field(default=default, metadata=metadata, **kwargs)


def inverse_of(
    navigation: str,
    *,
    default_factory: Callable[[], Any] = list,
    **kwargs: Any,
) -> Any:
    """Declare a dataclass collection field whose items reference the owner via ``navigation``."""

    metadata = dict(kwargs.pop("metadata", None) or {})
    metadata[INVERSE_OF_METADATA] = navigation
    return dataclasses.field(default_factory=default_factory, metadata=metadata, **kwargs)
