"""Pydantic schemas for post API."""
from datetime import datetime
from typing import Optional

from pydantic import Field

from location_core.metadata import extract_tiktok_video_id, tiktok_embed_url
from location_core.platforms import PostPlatform, detect_platform
from location_core.types import PostView
from schemas.base import CamelModel


class PostCreate(CamelModel):
    """Payload for sharing a post URL."""

    url: str = Field(min_length=1, max_length=2048)


def embed_url_for(url: str) -> Optional[str]:
    """TikTok player URL for a post, when its video id is in the URL."""
    if detect_platform(url) is not PostPlatform.TIKTOK:
        return None
    video_id = extract_tiktok_video_id(url)
    return tiktok_embed_url(video_id) if video_id else None


class PostResponse(CamelModel):
    """Post in API responses."""

    id: int
    url: str
    posted_by: Optional[int] = None
    location_id: int
    posted_at: datetime
    embed_url: Optional[str] = None

    @classmethod
    def from_view(cls, view: PostView) -> "PostResponse":
        return cls(
            id=view.id,
            url=view.url,
            posted_by=view.posted_by,
            location_id=view.location_id,
            posted_at=view.posted_at,
            embed_url=embed_url_for(view.url),
        )
