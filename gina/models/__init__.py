"""
All database models. Imported here so Base.metadata sees them for create_all().
"""

from .base import RecordBase, UserOwnedBase
from .user import User
from .conversation import Conversation
from .intake import Intake, INTAKE_FIELDS
from .memory import UserMemory
from .journal import Journal

__all__ = [
    "RecordBase", "UserOwnedBase",
    "User",
    "Conversation",
    "Intake", "INTAKE_FIELDS",
    "UserMemory",
    "Journal",
]
