"""Location model: canonical place record, deduplicated by Google place id."""
from datetime import datetime

from sqlalchemy import Boolean, DateTime, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from models import Base, utcnow
from models.types import Point

EMOJI_MAX_LEN = 16


class Location(Base):
    """location table: one row per real place (or per unresolved share when google_place_id is NULL)."""

    __tablename__ = "location"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    # UNIQUE still allows any number of NULLs (fallback locations).
    google_place_id: Mapped[str | None] = mapped_column(String(255), unique=True, nullable=True)
    title: Mapped[str] = mapped_column(String(100), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    emoji: Mapped[str] = mapped_column(String(EMOJI_MAX_LEN), nullable=False)
    coordinates: Mapped[tuple[float, float]] = mapped_column(Point, nullable=False)
    is_valid_location: Mapped[bool] = mapped_column(Boolean, nullable=False)
    # Promoted by moderation; never true at creation.
    recommendable: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    website_url: Mapped[str | None] = mapped_column(String(2048), nullable=True)
    phone_number: Mapped[str | None] = mapped_column(String(32), nullable=True)
    address: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)
