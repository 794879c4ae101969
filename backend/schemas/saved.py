"""Pydantic schemas for the saved-locations view."""
from typing import Optional

from location_core.types import FolderInfo, SavedRow, SavedView
from schemas.base import CamelModel
from schemas.locations import LocationResponse
from schemas.posts import PostResponse


class SavedRowResponse(CamelModel):
    location: LocationResponse
    top_post: Optional[PostResponse] = None

    @classmethod
    def from_row(cls, row: SavedRow) -> "SavedRowResponse":
        return cls(
            location=LocationResponse.from_view(row.location),
            top_post=PostResponse.from_view(row.top_post) if row.top_post else None,
        )


class FolderResponse(CamelModel):
    """Folder metadata keyed by folder id in the saved view."""

    name: str
    color: str
    creator_id: Optional[int] = None
    owner_ids: list[int] = []

    @classmethod
    def from_info(cls, info: FolderInfo) -> "FolderResponse":
        return cls(name=info.name, color=info.color, creator_id=info.creator_id, owner_ids=list(info.owner_ids))


class SavedViewResponse(CamelModel):
    """Response for GET /saved. Scope keys are folder ids as strings; personal also has "uncategorised"."""

    personal: dict[str, list[SavedRowResponse]]
    shared: dict[str, list[SavedRowResponse]]
    followed: dict[str, list[SavedRowResponse]]
    folders: dict[str, FolderResponse]

    @classmethod
    def from_view(cls, view: SavedView) -> "SavedViewResponse":
        def scope(rows_by_key):
            return {key: [SavedRowResponse.from_row(r) for r in rows] for key, rows in rows_by_key.items()}

        return cls(
            personal=scope(view.personal),
            shared=scope(view.shared),
            followed=scope(view.followed),
            folders={key: FolderResponse.from_info(info) for key, info in view.folders.items()},
        )
