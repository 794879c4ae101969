"""LocationEdit model: per-(user, location) overrides of canonical location fields."""
from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from models import Base, utcnow
from models.types import Point

# Columns a user may override; NULL means "use the canonical value".
EDITABLE_FIELDS = (
    "google_place_id",
    "title",
    "description",
    "emoji",
    "coordinates",
    "website_url",
    "phone_number",
    "address",
)


class LocationEdit(Base):
    """location_edit table: at most one row per (user_id, location_id)."""

    __tablename__ = "location_edit"

    user_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("app_user.id", ondelete="CASCADE"),
        primary_key=True,
    )
    location_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("location.id", ondelete="CASCADE"),
        primary_key=True,
    )
    google_place_id: Mapped[str | None] = mapped_column(String(255), nullable=True)
    title: Mapped[str | None] = mapped_column(String(100), nullable=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    emoji: Mapped[str | None] = mapped_column(String(16), nullable=True)
    coordinates: Mapped[tuple[float, float] | None] = mapped_column(Point, nullable=True)
    website_url: Mapped[str | None] = mapped_column(String(2048), nullable=True)
    phone_number: Mapped[str | None] = mapped_column(String(32), nullable=True)
    address: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)
    last_updated: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)
