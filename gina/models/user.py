"""
Users. Identity anchor for every other record.
"""

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from .base import RecordBase


class User(RecordBase):
    __tablename__ = "users"

    email: Mapped[str] = mapped_column(String, unique=True, nullable=False, index=True)
    password_hash: Mapped[str] = mapped_column(String, nullable=False)
    username: Mapped[str] = mapped_column(String, nullable=True)

    def to_public(self) -> dict:
        return {
            "id": self.id,
            "email": self.email,
            "username": self.username,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }
