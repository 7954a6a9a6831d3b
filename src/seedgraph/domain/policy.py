"""Duplicate-key policy selected per seeder."""

from __future__ import annotations

from enum import StrEnum


class DuplicatePolicy(StrEnum):
    """Behaviour when two records of one type share a primary key.

    - ``HALT``: raise on a collision whose persistable values differ
    - ``MERGE``: overwrite the earlier/stored record with the later values
    - ``SKIP``: keep whichever record was applied or stored first
    - ``ALWAYS_ADD``: synthesize a fresh key for the later record
    """

    HALT = "halt"
    MERGE = "merge"
    SKIP = "skip"
    ALWAYS_ADD = "always_add"

    @classmethod
    def parse(cls, value: str | DuplicatePolicy) -> DuplicatePolicy:
        """Parse ``value`` leniently (case-insensitive, ``-`` or ``_`` separators)."""

        if isinstance(value, DuplicatePolicy):
            return value
        normalized = value.strip().lower().replace("-", "_")
        try:
            return cls(normalized)
        except ValueError:
            choices = ", ".join(member.value for member in cls)
            raise ValueError(
                f"Unknown duplicate policy {value!r}; expected one of {choices}"
            ) from None
