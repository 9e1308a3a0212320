"""SQLAlchemy ORM models for PomoCycle."""

from datetime import datetime
from sqlalchemy import Column, String, Text, DateTime
from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    pass


class Preference(Base):
    """One opaque value stored under a string key."""

    __tablename__ = "preferences"

    key = Column(String(128), primary_key=True)
    value = Column(Text, nullable=False)
    updated_at = Column(
        DateTime, nullable=False, default=datetime.now, onupdate=datetime.now,
    )

    def __repr__(self) -> str:
        return f"<Preference key={self.key} bytes={len(self.value or '')}>"
