"""
User memory persistence.

One open-ended facts object per user that persists across sessions:
preferredName, pronouns, age, location, hobbies, support, summary,
lastMentalMetrics, ... Every write is a shallow merge.
"""

from sqlalchemy import JSON, String, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column

from .base import RecordBase


class UserMemory(RecordBase):
    __tablename__ = "memories"

    user_id: Mapped[str] = mapped_column(
        String, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, unique=True
    )
    facts: Mapped[dict] = mapped_column(JSON, nullable=False, default=dict)
