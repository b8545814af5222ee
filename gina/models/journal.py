"""
Private journal entries.
"""

from sqlalchemy import JSON, Text
from sqlalchemy.orm import Mapped, mapped_column

from .base import UserOwnedBase


class Journal(UserOwnedBase):
    __tablename__ = "journals"

    content: Mapped[str] = mapped_column(Text, nullable=False)
    tags: Mapped[list] = mapped_column(JSON, nullable=False, default=list)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "content": self.content,
            "tags": self.tags or [],
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }
