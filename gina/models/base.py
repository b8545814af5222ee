"""
Base model with id + timestamps. Every model inherits from this.
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import String, DateTime, ForeignKey
from sqlalchemy.orm import Mapped, declared_attr, mapped_column

from ..core.database import Base


def utcnow():
    return datetime.now(timezone.utc)


def new_uuid():
    return str(uuid.uuid4())


class RecordBase(Base):
    """Abstract base with a string uuid primary key and timestamps."""

    __abstract__ = True

    id: Mapped[str] = mapped_column(
        String, primary_key=True, default=new_uuid
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow
    )


class UserOwnedBase(RecordBase):
    """Abstract base for rows that belong to a user. Deleted with the user."""

    __abstract__ = True

    @declared_attr
    def user_id(cls) -> Mapped[str]:
        return mapped_column(
            String, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
        )
