"""SQLAlchemy declarative base and models."""
from datetime import datetime, timezone

from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """Base class for all DB models."""
    pass


def utcnow() -> datetime:
    """Timestamp default for created/updated columns."""
    return datetime.now(timezone.utc)
