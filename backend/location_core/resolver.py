"""Resolve a shared post URL to a Location, always attaching a Post to some location.

Each external stage returns Resolved(value) or Unresolved(stage, reason). The first
Unresolved routes the share to the single fallback branch, so an external failure
never reaches the caller. Client input errors and storage failures do.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Awaitable, Generic, Optional, TypeVar, Union
from urllib.parse import urlparse

import httpx
from sqlalchemy.orm import Session

from db import SessionFactory
from location_core.errors import ExternalServiceError, StorageError, UnrecognizedPlatformError
from location_core.inference import LocationTextGenerator
from location_core.metadata import MetadataExtractor, metadata_from_url
from location_core.places import PlacesClient
from location_core.platforms import detect_platform
from location_core.storage import run_in_session
from location_core.types import (
    LocationDraft,
    LocationView,
    PostMetadata,
    PostView,
    ResolvedPost,
    Tagline,
)
from repositories.location_repository import create_location, get_location, get_location_by_place_id
from repositories.post_repository import create_post
from repositories.saved_location_repository import save_location
from utils.text import truncate

LOG = logging.getLogger(__name__)

T = TypeVar("T")

FALLBACK_DESCRIPTION = "Saved post"
FALLBACK_EMOJI = "❓"
FALLBACK_COORDINATES = (0.0, 0.0)
TITLE_MAX_LEN = 100


@dataclass(frozen=True)
class Resolved(Generic[T]):
    value: T


@dataclass(frozen=True)
class Unresolved:
    stage: str
    reason: str


StageResult = Union[Resolved[T], Unresolved]


@dataclass(frozen=True)
class ExistingPlace:
    location_id: int


@dataclass(frozen=True)
class NewPlace:
    draft: LocationDraft


PlaceOutcome = Union[ExistingPlace, NewPlace]


async def _stage(name: str, call: Awaitable[T]) -> StageResult[T]:
    """Await an external call, turning service failures into Unresolved."""
    try:
        return Resolved(await call)
    except (ExternalServiceError, httpx.HTTPError) as e:
        return Unresolved(name, str(e) or type(e).__name__)


def _write_post(
    session: Session,
    outcome: PlaceOutcome,
    url: str,
    user_id: int,
) -> ResolvedPost:
    """Location create-or-reuse, Post and saved mark in one transaction."""
    try:
        if isinstance(outcome, ExistingPlace):
            location = get_location(session, outcome.location_id)
            if location is None:
                raise StorageError(f"location {outcome.location_id} disappeared before the post was written")
            created = False
        else:
            draft = outcome.draft
            location, created = create_location(
                session,
                title=draft.title,
                emoji=draft.emoji,
                coordinates=draft.coordinates,
                is_valid_location=draft.is_valid_location,
                google_place_id=draft.google_place_id,
                description=draft.description,
                website_url=draft.website_url,
                phone_number=draft.phone_number,
                address=draft.address,
                commit=False,
            )
        post = create_post(session, url=url, posted_by=user_id, location_id=location.id, commit=False)
        save_location(session, user_id, location.id, commit=False)
        session.commit()
    except Exception:
        session.rollback()
        raise
    session.refresh(location)
    session.refresh(post)
    return ResolvedPost(
        post=PostView.from_model(post),
        location=LocationView.from_model(location),
        created_location=created,
    )


def _find_place(session: Session, place_id: str) -> Optional[int]:
    location = get_location_by_place_id(session, place_id)
    return location.id if location is not None else None


def fallback_draft(metadata: PostMetadata, tagline: Optional[Tagline], url: str) -> LocationDraft:
    """The placeholder location for a share whose place could not be identified."""
    host = (urlparse(url).hostname or "").removeprefix("www.")
    title = (tagline.title if tagline else None) or metadata.title or host or "Shared post"
    return LocationDraft(
        title=truncate(title, TITLE_MAX_LEN),
        description=tagline.description if tagline else FALLBACK_DESCRIPTION,
        emoji=tagline.emoji if tagline else FALLBACK_EMOJI,
        coordinates=FALLBACK_COORDINATES,
        is_valid_location=False,
        google_place_id=None,
    )


class PostResolver:
    """
    Post-to-location pipeline:
    platform -> metadata -> place query -> place search -> (existing | details -> tagline -> create).
    """

    def __init__(
        self,
        session_factory: SessionFactory,
        extractor: MetadataExtractor,
        places: PlacesClient,
        generator: LocationTextGenerator,
    ) -> None:
        self._session_factory = session_factory
        self._extractor = extractor
        self._places = places
        self._generator = generator

    async def resolve(self, url: str, user_id: int) -> ResolvedPost:
        """
        Attach a new Post by user_id to the location url points at, saving it for the user.
        Raises UnrecognizedPlatformError for URLs no post can come from, StorageError on
        database failure. Everything else ends in a location, possibly the fallback one.
        """
        url = url.strip()
        platform = detect_platform(url)
        if platform is None:
            raise UnrecognizedPlatformError(url)

        meta = await _stage("metadata", self._extractor.extract(url, platform))
        if isinstance(meta, Unresolved):
            return await self._fallback(url, user_id, metadata_from_url(url), meta)

        located = await self._locate(meta.value)
        if isinstance(located, Unresolved):
            return await self._fallback(url, user_id, meta.value, located)

        result = await run_in_session(self._session_factory, _write_post, located.value, url, user_id)
        LOG.info(
            "Post %s by user %s attached to location %s (created=%s)",
            result.post.id, user_id, result.location.id, result.created_location,
        )
        return result

    async def _locate(self, metadata: PostMetadata) -> StageResult[PlaceOutcome]:
        query = await _stage("infer", self._generator.infer_place_query(metadata))
        if isinstance(query, Unresolved):
            return query
        if not query.value:
            return Unresolved("infer", "no confident place")

        found = await _stage("search", self._places.search_text(query.value))
        if isinstance(found, Unresolved):
            return found
        if found.value is None:
            return Unresolved("search", f"no places for {query.value!r}")
        place_id = found.value

        existing_id = await run_in_session(self._session_factory, _find_place, place_id)
        if existing_id is not None:
            return Resolved(ExistingPlace(existing_id))

        details = await _stage("details", self._places.get_details(place_id))
        if isinstance(details, Unresolved):
            return details
        place = details.value

        tagline = await _stage("tagline", self._generator.generate_location_details(metadata, place))
        if isinstance(tagline, Unresolved):
            return tagline

        return Resolved(NewPlace(LocationDraft(
            title=truncate(place.name, TITLE_MAX_LEN),
            description=tagline.value.description,
            emoji=tagline.value.emoji,
            coordinates=place.coordinates,
            is_valid_location=True,
            google_place_id=place.place_id,
            website_url=place.website_url,
            phone_number=place.phone_number,
            address=place.address,
        )))

    async def _fallback(
        self,
        url: str,
        user_id: int,
        metadata: PostMetadata,
        reason: Unresolved,
    ) -> ResolvedPost:
        LOG.warning("Fallback location for %s: %s stage unresolved (%s)", url, reason.stage, reason.reason)
        tagline = await _stage("tagline", self._generator.generate_location_details(metadata))
        if isinstance(tagline, Unresolved):
            LOG.warning("Fallback tagline unavailable for %s (%s)", url, tagline.reason)
        draft = fallback_draft(metadata, tagline.value if isinstance(tagline, Resolved) else None, url)
        return await run_in_session(self._session_factory, _write_post, NewPlace(draft), url, user_id)
