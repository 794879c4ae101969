"""Folder model and its junction tables (locations, owners, followers)."""
from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from models import Base, utcnow


class Folder(Base):
    """folder table: id, creator_id, name, color, created_at."""

    __tablename__ = "folder"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    creator_id: Mapped[int | None] = mapped_column(
        Integer,
        ForeignKey("app_user.id", ondelete="SET NULL"),
        nullable=True,
    )
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    color: Mapped[str] = mapped_column(String(16), nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)


class FolderLocation(Base):
    """folder_location junction: many-to-many between folders and locations."""

    __tablename__ = "folder_location"

    folder_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("folder.id", ondelete="CASCADE"),
        primary_key=True,
    )
    location_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("location.id", ondelete="CASCADE"),
        primary_key=True,
    )


class FolderOwner(Base):
    """folder_owner junction: creator plus any co-owners. Never empty while the folder exists."""

    __tablename__ = "folder_owner"

    folder_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("folder.id", ondelete="CASCADE"),
        primary_key=True,
    )
    user_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("app_user.id", ondelete="CASCADE"),
        primary_key=True,
    )


class FolderFollow(Base):
    """folder_follow junction: read-only followers."""

    __tablename__ = "folder_follow"

    user_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("app_user.id", ondelete="CASCADE"),
        primary_key=True,
    )
    folder_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("folder.id", ondelete="CASCADE"),
        primary_key=True,
    )
