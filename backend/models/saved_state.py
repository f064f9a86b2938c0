from sqlalchemy import String, Text
from sqlalchemy.orm import Mapped, mapped_column

from backend.models.base import Base, TimestampMixin


class SavedState(Base, TimestampMixin):
    __tablename__ = "saved_states"

    key: Mapped[str] = mapped_column(String(100), primary_key=True)
    blob: Mapped[str] = mapped_column(Text, nullable=False)  # JSON drill state, opaque to the DB
