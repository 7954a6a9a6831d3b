"""Duplicate-key collapsing for declarative sinks.

A declarative sink cannot be queried, so collisions are only detected inside the
batch by grouping on the key value.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from ..policy import DuplicatePolicy
from ..relationships import find_primary_key

if TYPE_CHECKING:
    from collections.abc import Sequence

log = logging.getLogger(__name__)


def collapse_duplicates[T](
    entity_type: type[T],
    entities: Sequence[T],
    policy: DuplicatePolicy,
) -> list[T]:
    """Return ``entities`` with at most one member per key.

    ``MERGE`` keeps the last member of each key group and ``ALWAYS_ADD`` keeps the
    first (keys cannot be re-generated for a schema-time batch). ``HALT`` and
    ``SKIP`` leave the batch as it is. Groups keep the position of their first
    member. ``None`` keys are never grouped.
    """

    if policy in (DuplicatePolicy.HALT, DuplicatePolicy.SKIP) or not entities:
        return list(entities)
    primary_key = find_primary_key(entity_type)
    if primary_key is None:
        log.debug("%s has no primary key; duplicates are not collapsed", entity_type.__name__)
        return list(entities)

    groups: dict[object, list[T]] = {}
    ungrouped = 0
    for entity in entities:
        key = getattr(entity, primary_key.name, None)
        if key is None:
            groups[("__unkeyed__", ungrouped)] = [entity]
            ungrouped += 1
            continue
        groups.setdefault(key, []).append(entity)

    if all(len(members) == 1 for members in groups.values()):
        return list(entities)

    if policy is DuplicatePolicy.ALWAYS_ADD:
        log.warning(
            "Declarative seed data cannot hold duplicate keys for %s; keeping the first "
            "record of each key",
            entity_type.__name__,
        )
        collapsed = [members[0] for members in groups.values()]
    else:
        collapsed = [members[-1] for members in groups.values()]
    log.debug(
        "Collapsed duplicate %s records: %d -> %d",
        entity_type.__name__,
        len(entities),
        len(collapsed),
    )
    return collapsed
