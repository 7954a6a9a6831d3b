"""Application orchestration entry points."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

from dotenv import load_dotenv

from seedgraph.adapters.sqlalchemy.unit_of_work import (
    SqlAlchemySeedUnitOfWork,
    is_started,
    startup,
)
from seedgraph.config import get_seeding_config
from seedgraph.domain.policy import DuplicatePolicy
from seedgraph.domain.seeder import EntitySeeder

if TYPE_CHECKING:
    from collections.abc import Callable
    from pathlib import Path

    from sqlalchemy import MetaData

    from seedgraph.domain.converters import ConverterRegistry
    from seedgraph.domain.ports import SeedUnitOfWork
    from seedgraph.domain.reconciliation import ApplyResult

type UnitOfWorkFactory = Callable[[], SeedUnitOfWork]


log = getLogger(__name__)


def seed_database(
    *roots: object,
    policy: DuplicatePolicy | str | None = None,
    database_uri: str | None = None,
    metadata: MetaData | None = None,
    env_file: str | Path | None = None,
    converters: ConverterRegistry | None = None,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> ApplyResult:
    """Register ``roots`` and apply everything reachable from them in one transaction.

    Without an explicit ``policy`` the configured ``SEEDGRAPH_DUPLICATE_POLICY`` is
    used. The SQLAlchemy adapter is started on ``database_uri`` (or the configured
    database) unless it is running already or a custom unit of work is supplied.
    """

    if env_file is not None:
        load_dotenv(env_file, override=False)
    effective_policy = (
        DuplicatePolicy.parse(policy)
        if policy is not None
        else get_seeding_config().duplicate_policy
    )
    if unit_of_work_factory is None:
        if not is_started():
            startup(database_uri=database_uri, metadata=metadata)
        unit_of_work_factory = SqlAlchemySeedUnitOfWork

    seeder = EntitySeeder(effective_policy, converters=converters)
    seeder.register_all(roots)
    log.info(
        "Seeding %d entities of %d type(s) with policy %s",
        len(seeder),
        len(seeder.entity_types),
        effective_policy.value,
    )

    with unit_of_work_factory() as uow:
        result = seeder.apply_to_store(uow.store)
        uow.commit()

    log.info(
        f"Finished seeding: added={result.added}, merged={result.merged}, "
        f"skipped={result.skipped}, rekeyed={result.rekeyed}, unchanged={result.unchanged}"
    )
    return result
