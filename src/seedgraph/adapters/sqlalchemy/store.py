"""Live store backed by a SQLAlchemy ORM session."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from sqlalchemy import inspect

if TYPE_CHECKING:
    from sqlalchemy.orm import Session

log = logging.getLogger(__name__)


def is_mapped(entity_type: type) -> bool:
    return inspect(entity_type, raiseerr=False) is not None


class SqlAlchemyEntitySet[TEntity]:
    def __init__(self, session: Session, entity_type: type[TEntity]) -> None:
        self.session = session
        self._entity_type = entity_type

    def find(self, key: object) -> TEntity | None:
        return self.session.get(self._entity_type, key)

    def add(self, entity: TEntity) -> None:
        self.session.add(entity)

    def update(self, entity: TEntity) -> None:
        # instances loaded through this session are tracked already; re-adding
        # attaches one that was detached in between
        self.session.add(entity)


class SqlAlchemyLiveStore:
    """Exposes an entity set for every class mapped in the session's registry."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def entity_set[TEntity](
        self,
        entity_type: type[TEntity],
    ) -> SqlAlchemyEntitySet[TEntity] | None:
        if not is_mapped(entity_type):
            log.debug("%s is not mapped; no entity set", entity_type.__name__)
            return None
        return SqlAlchemyEntitySet(self.session, entity_type)

    def flush(self) -> None:
        self.session.flush()


if TYPE_CHECKING:
    from seedgraph.domain.ports import LiveStore

    _store_check: LiveStore = SqlAlchemyLiveStore(Session())
