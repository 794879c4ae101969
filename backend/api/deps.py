"""Shared FastAPI dependencies: viewer authentication and the post resolver."""
import logging
from typing import AsyncIterator, Optional

import httpx
from fastapi import Depends, Header, HTTPException, status

from db import SessionFactory, get_session_factory
from location_core.errors import StorageError
from location_core.inference import LocationTextGenerator
from location_core.llm import GeminiClient
from location_core.metadata import MetadataExtractor
from location_core.places import PlacesClient
from location_core.resolver import PostResolver
from location_core.storage import run_in_session
from repositories.user_repository import verify_session_token
from utils.config import EXTERNAL_TIMEOUT_S, GEMINI_API_KEY, GEMINI_MODEL, GOOGLE_PLACES_API_KEY

LOG = logging.getLogger(__name__)


def bearer_token(authorization: Optional[str]) -> Optional[str]:
    """Token from an "Authorization: Bearer <token>" header value, else None."""
    if not authorization:
        return None
    scheme, _, token = authorization.strip().partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


async def authenticate(token: Optional[str], session_factory: SessionFactory) -> int:
    """User id for a session token; 401 when missing, unknown or expired."""
    if token is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing bearer token",
            headers={"WWW-Authenticate": "Bearer"},
        )
    try:
        user_id = await run_in_session(session_factory, verify_session_token, token)
    except StorageError as e:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Storage error") from e
    if user_id is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired session",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return user_id


async def get_current_user_id(
    authorization: Optional[str] = Header(default=None),
    session_factory: SessionFactory = Depends(get_session_factory),
) -> int:
    """FastAPI dependency: id of the authenticated viewer."""
    return await authenticate(bearer_token(authorization), session_factory)


async def get_http_client() -> AsyncIterator[httpx.AsyncClient]:
    """FastAPI dependency: one outbound HTTP client per request, closed afterwards."""
    async with httpx.AsyncClient(timeout=EXTERNAL_TIMEOUT_S, follow_redirects=True) as http:
        yield http


def get_post_resolver(
    http: httpx.AsyncClient = Depends(get_http_client),
    session_factory: SessionFactory = Depends(get_session_factory),
) -> PostResolver:
    """FastAPI dependency: resolver wired to Gemini, Google Places and the scrapers."""
    generator = LocationTextGenerator(GeminiClient(http, api_key=GEMINI_API_KEY, model=GEMINI_MODEL))
    return PostResolver(
        session_factory,
        MetadataExtractor(http, generator),
        PlacesClient(http, api_key=GOOGLE_PLACES_API_KEY),
        generator,
    )
