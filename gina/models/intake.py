"""
Intake questionnaire. One row per user, overwritten by merge on each submission.
"""

from sqlalchemy import String, Text, Integer, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column

from .base import RecordBase

INTAKE_FIELDS = (
    "full_name",
    "age",
    "pronouns",
    "location",
    "presenting_issues",
    "goals",
    "symptoms",
    "severity",
    "duration",
    "risk_factors",
    "medications",
    "history_therapy",
    "preferences",
    "availability",
    "suggestion",
)


class Intake(RecordBase):
    __tablename__ = "intakes"

    user_id: Mapped[str] = mapped_column(
        String, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, unique=True
    )
    full_name: Mapped[str] = mapped_column(String, nullable=True)
    age: Mapped[int] = mapped_column(Integer, nullable=True)
    pronouns: Mapped[str] = mapped_column(String, nullable=True)
    location: Mapped[str] = mapped_column(String, nullable=True)
    presenting_issues: Mapped[str] = mapped_column(Text, nullable=True)
    goals: Mapped[str] = mapped_column(Text, nullable=True)
    symptoms: Mapped[str] = mapped_column(Text, nullable=True)
    severity: Mapped[int] = mapped_column(Integer, nullable=True)  # 1-5
    duration: Mapped[str] = mapped_column(String, nullable=True)
    risk_factors: Mapped[str] = mapped_column(Text, nullable=True)
    medications: Mapped[str] = mapped_column(Text, nullable=True)
    history_therapy: Mapped[str] = mapped_column(Text, nullable=True)
    preferences: Mapped[str] = mapped_column(Text, nullable=True)
    availability: Mapped[str] = mapped_column(String, nullable=True)
    # Derived by the intake handler, never by the chat pipeline
    suggestion: Mapped[str] = mapped_column(String, nullable=True)

    def to_dict(self) -> dict:
        data = {name: getattr(self, name) for name in INTAKE_FIELDS}
        data["user_id"] = self.user_id
        data["updated_at"] = self.updated_at.isoformat() if self.updated_at else None
        return data
