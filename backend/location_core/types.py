"""Plain value types passed between the resolver, overlay and saved-view stages."""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Optional

Coordinates = tuple[float, float]


@dataclass(frozen=True)
class PostMetadata:
    """Normalized description of a shared post, whatever platform it came from."""

    title: str
    author_name: str
    thumbnail_url: Optional[str] = None
    description: str = ""
    location_hint: Optional[str] = None
    author_url: Optional[str] = None
    video_id: Optional[str] = None


@dataclass(frozen=True)
class PlaceDetails:
    place_id: str
    name: str
    coordinates: Coordinates
    address: Optional[str] = None
    phone_number: Optional[str] = None
    website_url: Optional[str] = None
    summary: Optional[str] = None


@dataclass(frozen=True)
class Tagline:
    description: str
    emoji: str
    title: Optional[str] = None


@dataclass(frozen=True)
class LocationView:
    id: int
    google_place_id: Optional[str]
    title: str
    description: Optional[str]
    emoji: str
    coordinates: Optional[Coordinates]
    is_valid_location: bool
    recommendable: bool
    website_url: Optional[str] = None
    phone_number: Optional[str] = None
    address: Optional[str] = None
    created_at: Optional[datetime] = None

    @classmethod
    def from_model(cls, row: Any) -> "LocationView":
        return cls(
            id=row.id,
            google_place_id=row.google_place_id,
            title=row.title,
            description=row.description,
            emoji=row.emoji,
            coordinates=row.coordinates,
            is_valid_location=bool(row.is_valid_location),
            recommendable=bool(row.recommendable),
            website_url=row.website_url,
            phone_number=row.phone_number,
            address=row.address,
            created_at=row.created_at,
        )


@dataclass(frozen=True)
class LocationEditView:
    """One user's overrides for one location; None fields fall through to the canonical value."""

    user_id: int
    location_id: int
    last_updated: datetime
    google_place_id: Optional[str] = None
    title: Optional[str] = None
    description: Optional[str] = None
    emoji: Optional[str] = None
    coordinates: Optional[Coordinates] = None
    website_url: Optional[str] = None
    phone_number: Optional[str] = None
    address: Optional[str] = None

    @classmethod
    def from_model(cls, row: Any) -> "LocationEditView":
        return cls(
            user_id=row.user_id,
            location_id=row.location_id,
            last_updated=row.last_updated,
            google_place_id=row.google_place_id,
            title=row.title,
            description=row.description,
            emoji=row.emoji,
            coordinates=row.coordinates,
            website_url=row.website_url,
            phone_number=row.phone_number,
            address=row.address,
        )


@dataclass(frozen=True)
class PostView:
    id: int
    url: str
    posted_by: Optional[int]
    location_id: int
    posted_at: datetime

    @classmethod
    def from_model(cls, row: Any) -> "PostView":
        return cls(
            id=row.id,
            url=row.url,
            posted_by=row.posted_by,
            location_id=row.location_id,
            posted_at=row.posted_at,
        )


@dataclass(frozen=True)
class LocationDraft:
    """Everything needed to insert a Location row."""

    title: str
    emoji: str
    coordinates: Coordinates
    is_valid_location: bool
    google_place_id: Optional[str] = None
    description: Optional[str] = None
    website_url: Optional[str] = None
    phone_number: Optional[str] = None
    address: Optional[str] = None


@dataclass(frozen=True)
class ResolvedPost:
    post: PostView
    location: LocationView
    created_location: bool


@dataclass(frozen=True)
class SavedRow:
    location: LocationView
    top_post: Optional[PostView] = None


@dataclass(frozen=True)
class FolderInfo:
    id: int
    name: str
    color: str
    creator_id: Optional[int]
    owner_ids: list[int] = field(default_factory=list)


@dataclass
class SavedView:
    """Three-scope saved payload. Folder keys are str(folder_id); "uncategorised" only under personal."""

    personal: dict[str, list[SavedRow]] = field(default_factory=dict)
    shared: dict[str, list[SavedRow]] = field(default_factory=dict)
    followed: dict[str, list[SavedRow]] = field(default_factory=dict)
    folders: dict[str, FolderInfo] = field(default_factory=dict)
