"""Recommendation API routes: nearby locations, for signed-in users and guests."""
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from api.deps import get_current_user_id
from db import get_db
from location_core.overlay import merge_location
from location_core.types import LocationEditView, LocationView, PostView
from repositories.location_edit_repository import list_edits_by_user
from repositories.location_repository import list_nearby_recommendations
from repositories.post_repository import latest_posts_by_location
from schemas.locations import LocationResponse, RecommendationResponse
from schemas.posts import PostResponse
from utils.config import RECOMMENDATION_LIMIT, RECOMMENDATION_RADIUS_KM

router = APIRouter(prefix="/recommendations", tags=["recommendations"])

# Matches no user, so nothing is excluded as "already posted".
GUEST_VIEWER_ID = -1


def _recommendations(
    db: Session,
    viewer_id: int,
    latitude: float,
    longitude: float,
    radius_km: float,
    limit: int,
    include_unrecommendable: bool,
) -> list[RecommendationResponse]:
    nearby = list_nearby_recommendations(
        db,
        viewer_id,
        latitude,
        longitude,
        radius_km=radius_km,
        limit=limit,
        include_unrecommendable=include_unrecommendable,
    )
    top_posts = latest_posts_by_location(db, [loc.id for loc, _ in nearby])
    edits = {}
    if viewer_id != GUEST_VIEWER_ID:
        edits = {e.location_id: LocationEditView.from_model(e) for e in list_edits_by_user(db, viewer_id)}
    results = []
    for loc, distance in nearby:
        view = merge_location(LocationView.from_model(loc), edits.get(loc.id))
        post = top_posts.get(loc.id)
        results.append(
            RecommendationResponse(
                location=LocationResponse.from_view(view),
                distance_km=round(distance, 3),
                top_post=PostResponse.from_view(PostView.from_model(post)) if post else None,
            )
        )
    return results


@router.get("", response_model=list[RecommendationResponse])
def recommendations(
    latitude: float = Query(ge=-90, le=90),
    longitude: float = Query(ge=-180, le=180),
    radius_km: float = Query(default=RECOMMENDATION_RADIUS_KM, gt=0, alias="radiusKm"),
    limit: int = Query(default=RECOMMENDATION_LIMIT, ge=1, le=100),
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db),
) -> list[RecommendationResponse]:
    """Recommendable locations near a point, excluding places the viewer has posted to."""
    return _recommendations(db, user_id, latitude, longitude, radius_km, limit, include_unrecommendable=False)


@router.get("/guest", response_model=list[RecommendationResponse])
def guest_recommendations(
    latitude: float = Query(ge=-90, le=90),
    longitude: float = Query(ge=-180, le=180),
    radius_km: float = Query(default=RECOMMENDATION_RADIUS_KM, gt=0, alias="radiusKm"),
    limit: int = Query(default=RECOMMENDATION_LIMIT, ge=1, le=100),
    db: Session = Depends(get_db),
) -> list[RecommendationResponse]:
    """Nearby locations for signed-out users; moderation status is not required."""
    return _recommendations(db, GUEST_VIEWER_ID, latitude, longitude, radius_km, limit, include_unrecommendable=True)
