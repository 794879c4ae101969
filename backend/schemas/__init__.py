# Schemas package
from .health import HealthResponse
from .locations import (
    LocationEditRequest,
    LocationEditResponse,
    LocationResponse,
    RecommendationResponse,
    ResolvedPostResponse,
)
from .posts import PostCreate, PostResponse
from .saved import SavedViewResponse

__all__ = [
    "HealthResponse",
    "LocationEditRequest",
    "LocationEditResponse",
    "LocationResponse",
    "PostCreate",
    "PostResponse",
    "RecommendationResponse",
    "ResolvedPostResponse",
    "SavedViewResponse",
]
