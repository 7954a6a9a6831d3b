"""Shared logging helpers for seedgraph."""

from __future__ import annotations

import logging


def configure_logging(*, level: int = logging.INFO, force: bool = False) -> None:
    """Initialise the root logger once with seedgraph's default format.

    The seeder logs skipped field writes and degraded duplicate handling at WARNING
    and per-field traversal detail at DEBUG. Pass ``level=logging.DEBUG`` to follow
    foreign-key assignment while building fixtures, and ``force=True`` to reconfigure
    during tests.
    """

    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
        datefmt="%H:%M:%S",
        force=force,
    )
