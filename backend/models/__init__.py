"""SQLAlchemy ORM models for the Wordloop database."""

from backend.models.base import Base
from backend.models.saved_state import SavedState

__all__ = ["Base", "SavedState"]
