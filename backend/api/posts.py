"""Post API routes: share a URL and attach it to a location."""
import logging
import uuid
from typing import Optional

from fastapi import APIRouter, Depends, Header, HTTPException, status

from api.deps import authenticate, bearer_token, get_post_resolver
from db import SessionFactory, get_session_factory
from location_core.errors import StorageError, UnrecognizedPlatformError
from location_core.resolver import PostResolver
from location_core.storage import run_in_session
from repositories.post_repository import record_save_attempt
from schemas.locations import ResolvedPostResponse
from schemas.posts import PostCreate

LOG = logging.getLogger(__name__)

router = APIRouter(prefix="/posts", tags=["posts"])


def _record_attempt(session, request_id: str, url: str, token: Optional[str]) -> None:
    record_save_attempt(session, request_id=request_id, url=url, session_token=token)


@router.post("", response_model=ResolvedPostResponse, status_code=status.HTTP_201_CREATED)
async def create_post(
    body: PostCreate,
    authorization: Optional[str] = Header(default=None),
    session_factory: SessionFactory = Depends(get_session_factory),
    resolver: PostResolver = Depends(get_post_resolver),
) -> ResolvedPostResponse:
    """Resolve a shared post URL to a location, attach the post and save it for the sharer."""
    request_id = str(uuid.uuid4())
    token = bearer_token(authorization)
    # Recorded before auth so failed shares are counted too.
    try:
        await run_in_session(session_factory, _record_attempt, request_id, body.url, token)
    except StorageError as e:
        LOG.warning("Could not record save attempt %s: %s", request_id, e)

    user_id = await authenticate(token, session_factory)
    try:
        resolved = await resolver.resolve(body.url, user_id)
    except UnrecognizedPlatformError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from e
    except StorageError as e:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Storage error") from e
    LOG.info("Share %s resolved to location %s", request_id, resolved.location.id)
    return ResolvedPostResponse.from_resolved(resolved)
