"""Pydantic schemas for location API."""
from datetime import datetime
from typing import Any, Optional

from pydantic import Field, model_validator

from location_core.types import LocationEditView, LocationView, ResolvedPost
from schemas.base import CamelModel
from schemas.posts import PostResponse


class LocationResponse(CamelModel):
    """Location (canonical or with an edit applied) in API responses."""

    id: int
    google_place_id: Optional[str] = None
    title: str
    description: Optional[str] = None
    emoji: str
    latitude: float
    longitude: float
    is_valid_location: bool
    recommendable: bool
    website_url: Optional[str] = None
    phone_number: Optional[str] = None
    address: Optional[str] = None
    created_at: Optional[datetime] = None

    @classmethod
    def from_view(cls, view: LocationView) -> "LocationResponse":
        latitude, longitude = view.coordinates or (0.0, 0.0)
        return cls(
            id=view.id,
            google_place_id=view.google_place_id,
            title=view.title,
            description=view.description,
            emoji=view.emoji,
            latitude=latitude,
            longitude=longitude,
            is_valid_location=view.is_valid_location,
            recommendable=view.recommendable,
            website_url=view.website_url,
            phone_number=view.phone_number,
            address=view.address,
            created_at=view.created_at,
        )


class LocationEditRequest(CamelModel):
    """Payload for PUT /locations/{id}/edit. Omitted fields keep their stored override."""

    google_place_id: Optional[str] = Field(default=None, max_length=255)
    title: Optional[str] = Field(default=None, min_length=1, max_length=100)
    description: Optional[str] = None
    emoji: Optional[str] = Field(default=None, min_length=1, max_length=16)
    latitude: Optional[float] = Field(default=None, ge=-90, le=90)
    longitude: Optional[float] = Field(default=None, ge=-180, le=180)
    website_url: Optional[str] = Field(default=None, max_length=2048)
    phone_number: Optional[str] = Field(default=None, max_length=32)
    address: Optional[str] = None

    @model_validator(mode="after")
    def check_fields(self) -> "LocationEditRequest":
        if ("latitude" in self.model_fields_set) != ("longitude" in self.model_fields_set):
            raise ValueError("latitude and longitude must be given together")
        if not self.model_fields_set:
            raise ValueError("no fields to update")
        return self

    def to_fields(self) -> dict[str, Any]:
        """Edit columns for the fields present in the request (explicit nulls clear an override)."""
        fields: dict[str, Any] = {}
        for name in self.model_fields_set:
            if name in ("latitude", "longitude"):
                continue
            fields[name] = getattr(self, name)
        if "latitude" in self.model_fields_set:
            if self.latitude is None or self.longitude is None:
                fields["coordinates"] = None
            else:
                fields["coordinates"] = (self.latitude, self.longitude)
        return fields


class LocationEditResponse(CamelModel):
    """The stored edit plus the location as the editor now sees it."""

    user_id: int
    location_id: int
    last_updated: datetime
    location: LocationResponse

    @classmethod
    def from_views(cls, edit: LocationEditView, merged: LocationView) -> "LocationEditResponse":
        return cls(
            user_id=edit.user_id,
            location_id=edit.location_id,
            last_updated=edit.last_updated,
            location=LocationResponse.from_view(merged),
        )


class RecommendationResponse(CamelModel):
    """A nearby location with its distance from the requested point."""

    location: LocationResponse
    distance_km: float
    top_post: Optional[PostResponse] = None


class ResolvedPostResponse(CamelModel):
    """Response for POST /posts: the new post and the location it was attached to."""

    post: PostResponse
    location: LocationResponse
    created_location: bool

    @classmethod
    def from_resolved(cls, resolved: ResolvedPost) -> "ResolvedPostResponse":
        return cls(
            post=PostResponse.from_view(resolved.post),
            location=LocationResponse.from_view(resolved.location),
            created_location=resolved.created_location,
        )
