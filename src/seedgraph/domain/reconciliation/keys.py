"""Fresh primary keys for ``ALWAYS_ADD`` collisions."""

from __future__ import annotations

import logging
import uuid
from typing import TYPE_CHECKING, Final

from ..errors import KeySynthesisExhaustedError

if TYPE_CHECKING:
    from collections.abc import Callable

log = logging.getLogger(__name__)

MAX_KEY_ATTEMPTS: Final[int] = 100


def next_candidate(key: object) -> object | None:
    """Integers are incremented and UUIDs regenerated; other key types yield ``None``."""

    if isinstance(key, bool):
        return None
    if isinstance(key, int):
        return key + 1
    if isinstance(key, uuid.UUID):
        return uuid.uuid4()
    return None


def synthesize_key(
    key: object,
    *,
    entity_type: type,
    is_taken: Callable[[object], bool],
    max_attempts: int = MAX_KEY_ATTEMPTS,
) -> object:
    """Return the first candidate after ``key`` for which ``is_taken`` is false.

    Raises :class:`KeySynthesisExhaustedError` once ``max_attempts`` candidates were
    all taken, and immediately for key types that cannot be generated (``str``).
    """

    candidate: object | None = key
    for attempt in range(1, max_attempts + 1):
        candidate = next_candidate(candidate)
        if candidate is None:
            raise KeySynthesisExhaustedError(entity_type=entity_type, key=key, attempts=0)
        if not is_taken(candidate):
            log.debug("Synthesized key %r from %r after %d attempt(s)", candidate, key, attempt)
            return candidate
    raise KeySynthesisExhaustedError(entity_type=entity_type, key=key, attempts=max_attempts)
