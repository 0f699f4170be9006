"""Mixins shared by the bookstore models.

- IdMixin: UUID string primary key
- TimestampMixin: created_at / updated_at audit columns
- SoftDeleteMixin: nullable deleted_at exposed as a tagged ``status``

Reads that must skip deleted rows go through ``Model.active()`` so the
filter lives in one place instead of scattered ``deleted_at`` checks.
"""
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, String


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def new_id() -> str:
    return str(uuid.uuid4())


@dataclass(frozen=True)
class Active:
    pass


@dataclass(frozen=True)
class Deleted:
    at: datetime


RecordStatus = Active | Deleted


class IdMixin:
    id = Column(String(36), primary_key=True, default=new_id)


class TimestampMixin:
    # Python-side defaults keep microsecond ordering on every backend
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)


class SoftDeleteMixin:
    deleted_at = Column(DateTime(timezone=True), nullable=True, index=True)

    @property
    def status(self) -> RecordStatus:
        if self.deleted_at is None:
            return Active()
        return Deleted(at=self.deleted_at)

    @classmethod
    def active(cls):
        """SQL criterion matching rows that are not soft-deleted."""
        return cls.deleted_at.is_(None)

    def mark_deleted(self, at: datetime | None = None) -> None:
        self.deleted_at = at or utcnow()
