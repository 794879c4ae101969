"""Saved-locations API route."""
from fastapi import APIRouter, Depends, HTTPException, status

from api.deps import get_current_user_id
from db import SessionFactory, get_session_factory
from location_core.errors import StorageError
from location_core.saved_view import build_saved_view
from schemas.saved import SavedViewResponse

router = APIRouter(prefix="/saved", tags=["saved"])


@router.get("", response_model=SavedViewResponse)
async def get_saved(
    user_id: int = Depends(get_current_user_id),
    session_factory: SessionFactory = Depends(get_session_factory),
) -> SavedViewResponse:
    """Viewer's saved locations grouped into personal, shared and followed folders."""
    try:
        view = await build_saved_view(user_id, session_factory=session_factory)
    except StorageError as e:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Storage error") from e
    return SavedViewResponse.from_view(view)
