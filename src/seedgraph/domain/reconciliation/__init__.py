"""Duplicate-key reconciliation for live stores and declarative sinks."""

from __future__ import annotations

from .declarative import collapse_duplicates
from .keys import MAX_KEY_ATTEMPTS, synthesize_key
from .live import reconcile_into_store
from .results import ApplyResult, SeedResult

__all__ = [
    "MAX_KEY_ATTEMPTS",
    "ApplyResult",
    "SeedResult",
    "collapse_duplicates",
    "reconcile_into_store",
    "synthesize_key",
]
