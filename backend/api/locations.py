"""Location API routes: per-user edits, explicit saves and post listings."""
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from api.deps import get_current_user_id
from db import get_db
from location_core.overlay import merge_location
from location_core.types import LocationEditView, LocationView, PostView
from repositories.location_edit_repository import upsert_location_edit
from repositories.location_repository import get_location
from repositories.post_repository import list_posts_for_location
from repositories.saved_location_repository import save_location
from schemas.locations import LocationEditRequest, LocationEditResponse
from schemas.posts import PostResponse

router = APIRouter(prefix="/locations", tags=["locations"])


def _require_location(db: Session, location_id: int):
    loc = get_location(db, location_id)
    if loc is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Location not found")
    return loc


@router.put("/{location_id}/edit", response_model=LocationEditResponse)
def edit_location(
    location_id: int,
    body: LocationEditRequest,
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db),
) -> LocationEditResponse:
    """Create or update the viewer's overrides for a location. Other users are unaffected."""
    loc = _require_location(db, location_id)
    edit = upsert_location_edit(db, user_id, location_id, body.to_fields())
    edit_view = LocationEditView.from_model(edit)
    merged = merge_location(LocationView.from_model(loc), edit_view)
    return LocationEditResponse.from_views(edit_view, merged)


@router.post("/{location_id}/save", status_code=status.HTTP_204_NO_CONTENT)
def save(
    location_id: int,
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db),
) -> None:
    """Add a location to the viewer's saved list. Saving again is a no-op."""
    _require_location(db, location_id)
    save_location(db, user_id, location_id)


@router.get("/{location_id}/posts", response_model=list[PostResponse])
def list_posts(
    location_id: int,
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db),
) -> list[PostResponse]:
    """All posts attached to a location, newest first."""
    _require_location(db, location_id)
    return [PostResponse.from_view(PostView.from_model(p)) for p in list_posts_for_location(db, location_id)]
