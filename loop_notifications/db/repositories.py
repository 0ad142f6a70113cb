from __future__ import annotations

from collections.abc import Iterable
from typing import Generic, TypeVar

from sqlalchemy import select
from sqlalchemy.orm import Session

from loop_notifications.db import models

ModelT = TypeVar("ModelT")


class BaseRepository(Generic[ModelT]):
    model: type[ModelT]

    def __init__(self, db: Session):
        self.db = db

    def create(self, **kwargs) -> ModelT:
        entity = self.model(**kwargs)
        self.db.add(entity)
        self.db.flush()
        return entity

    def get(self, entity_id: int) -> ModelT | None:
        return self.db.get(self.model, entity_id)

    def list(self, limit: int = 100, offset: int = 0) -> list[ModelT]:
        stmt = select(self.model).offset(offset).limit(limit)
        return self.db.execute(stmt).scalars().all()

    def delete(self, entity: ModelT) -> None:
        self.db.delete(entity)
        self.db.flush()


class UserRepository(BaseRepository[models.User]):
    model = models.User

    def load_multiple(self, uids: Iterable[int]) -> list[models.User]:
        """Return users with the given ids, ordered by uid.  Unknown ids are skipped."""
        uids = list(uids)
        if not uids:
            return []
        stmt = select(models.User).where(models.User.uid.in_(uids)).order_by(models.User.uid)
        return list(self.db.execute(stmt).scalars().all())


class TaxonomyTermRepository(BaseRepository[models.TaxonomyTerm]):
    model = models.TaxonomyTerm


class NodeRepository(BaseRepository[models.Node]):
    model = models.Node


class MessageRepository(BaseRepository[models.Message]):
    model = models.Message

    def list_by_templates(self, templates: Iterable[str]) -> list[models.Message]:
        """Return messages created from one of *templates*, newest first."""
        stmt = (
            select(models.Message)
            .where(models.Message.template.in_(list(templates)))
            .order_by(models.Message.created.desc(), models.Message.mid.desc())
        )
        return list(self.db.execute(stmt).scalars().all())


class FlaggingRepository(BaseRepository[models.Flagging]):
    model = models.Flagging

    def flagging_uids(self, flag_ids: Iterable[str]) -> list[int]:
        """Return the distinct ids of users holding at least one of *flag_ids*."""
        stmt = (
            select(models.Flagging.uid)
            .where(models.Flagging.flag_id.in_(list(flag_ids)))
            .distinct()
            .order_by(models.Flagging.uid)
        )
        return list(self.db.execute(stmt).scalars().all())

    def targets(self, flag_id: str) -> list[tuple[int, int]]:
        """Return ``(uid, entity_id)`` pairs for every flagging of *flag_id*."""
        stmt = (
            select(models.Flagging.uid, models.Flagging.entity_id)
            .where(models.Flagging.flag_id == flag_id)
            .order_by(models.Flagging.id)
        )
        return [(row.uid, row.entity_id) for row in self.db.execute(stmt)]
