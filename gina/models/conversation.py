"""
Conversation history. One JSON blob per row; the most recently updated row
for a user is the live history.
"""

from sqlalchemy import JSON
from sqlalchemy.orm import Mapped, mapped_column

from .base import UserOwnedBase


class Conversation(UserOwnedBase):
    __tablename__ = "conversations"

    # Ordered turns: [{"role": "user", "content": "..."}, {"role": "assistant", ...}]
    # Replaced wholesale on every save, never edited in place.
    history: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
