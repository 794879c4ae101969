"""Integration tests: post resolution against a file-backed DB with faked external services."""
import asyncio
from unittest.mock import AsyncMock

import httpx
import pytest
from sqlalchemy import func, select

from location_core.errors import ExternalServiceError, StorageError, UnrecognizedPlatformError
from location_core.inference import LocationTextGenerator
from location_core.metadata import MetadataExtractor
from location_core.places import PlacesClient
from location_core.resolver import FALLBACK_DESCRIPTION, FALLBACK_EMOJI, PostResolver
from location_core.types import PlaceDetails, PostMetadata, Tagline
from models.location import Location
from models.post import Post
from repositories.location_repository import create_location
from repositories.saved_location_repository import list_saved_location_ids

pytestmark = pytest.mark.integration

TIKTOK_URL = "https://www.tiktok.com/@joesfan/video/7301234567890123456"
META = PostMetadata(title="Best slice in NYC at Joe's", author_name="joesfan")
PLACE = PlaceDetails(
    place_id="ChIJ-joes",
    name="Joe's Pizza",
    coordinates=(40.7306, -74.0021),
    address="7 Carmine St",
    phone_number="(212) 366-1182",
    website_url="https://joespizzanyc.com",
)


def _resolver(session_factory, *, metadata=META, query="Joe's Pizza NYC", place_id="ChIJ-joes", details=PLACE,
              tagline=Tagline(title="Joe's slice", description="New York pizza", emoji="🍕")):
    extractor = AsyncMock()
    places = AsyncMock()
    generator = AsyncMock()
    for mock, attr, value in (
        (extractor, "extract", metadata),
        (generator, "infer_place_query", query),
        (places, "search_text", place_id),
        (places, "get_details", details),
        (generator, "generate_location_details", tagline),
    ):
        if isinstance(value, BaseException):
            getattr(mock, attr).side_effect = value
        else:
            getattr(mock, attr).return_value = value
    resolver = PostResolver(session_factory, extractor, places, generator)
    return resolver, extractor, places, generator


def _count(db, model):
    return db.execute(select(func.count()).select_from(model)).scalar_one()


@pytest.mark.integration
class TestResolvePlace:
    async def test_new_place_creates_location_post_and_saved_mark(self, session_factory, db, viewer):
        """A miss creates a valid location from place details and saves it for the sharer."""
        resolver, *_ = _resolver(session_factory)
        result = await resolver.resolve(TIKTOK_URL, viewer.id)
        assert result.created_location is True
        loc = result.location
        assert loc.google_place_id == "ChIJ-joes"
        assert loc.title == "Joe's Pizza"
        assert loc.description == "New York pizza"
        assert loc.emoji == "🍕"
        assert loc.coordinates == (40.7306, -74.0021)
        assert loc.is_valid_location is True
        assert loc.recommendable is False
        assert loc.website_url == "https://joespizzanyc.com"
        assert result.post.url == TIKTOK_URL
        assert result.post.posted_by == viewer.id
        assert result.post.location_id == loc.id
        assert list_saved_location_ids(db, viewer.id) == [loc.id]

    async def test_existing_place_is_reused_without_details_call(self, session_factory, db, viewer):
        """A hit on the place id attaches the post to the stored location."""
        existing, _ = create_location(
            db, title="Joe's", emoji="🍕", coordinates=(40.73, -74.0), is_valid_location=True,
            google_place_id="ChIJ-joes",
        )
        resolver, _, places, generator = _resolver(session_factory)
        result = await resolver.resolve(TIKTOK_URL, viewer.id)
        assert result.created_location is False
        assert result.location.id == existing.id
        places.get_details.assert_not_awaited()
        generator.generate_location_details.assert_not_awaited()

    async def test_dedup_under_concurrent_shares(self, session_factory, db, viewer_factory):
        """Concurrent shares of the same place end up on one location."""
        alice = viewer_factory("alice")
        bob = viewer_factory("bob")
        resolver, *_ = _resolver(session_factory)
        first, second = await asyncio.gather(
            resolver.resolve(TIKTOK_URL, alice.id),
            resolver.resolve(TIKTOK_URL, bob.id),
        )
        assert first.location.id == second.location.id
        assert sorted([first.created_location, second.created_location]) == [False, True]
        rows = db.execute(select(Location).where(Location.google_place_id == "ChIJ-joes")).scalars().all()
        assert len(rows) == 1
        assert _count(db, Post) == 2

    async def test_distinct_urls_for_one_place_share_a_location(self, session_factory, db, viewer_factory):
        """Two different posts about the same place id create one location and two posts."""
        alice = viewer_factory("alice")
        bob = viewer_factory("bob")
        resolver, *_ = _resolver(session_factory)
        first = await resolver.resolve(TIKTOK_URL, alice.id)
        second = await resolver.resolve("https://www.instagram.com/p/C0joesPizza/", bob.id)
        assert first.created_location is True
        assert second.created_location is False
        assert second.location.id == first.location.id
        assert first.post.url != second.post.url
        assert _count(db, Location) == 1
        assert _count(db, Post) == 2
        assert list_saved_location_ids(db, bob.id) == [first.location.id]

    async def test_concurrent_distinct_urls_for_one_place(self, session_factory, db, viewer_factory):
        """Concurrent shares of different URLs that resolve to one place id still dedupe."""
        alice = viewer_factory("alice")
        bob = viewer_factory("bob")
        resolver, *_ = _resolver(session_factory)
        first, second = await asyncio.gather(
            resolver.resolve(TIKTOK_URL, alice.id),
            resolver.resolve("https://joespizzanyc.com/", bob.id),
        )
        assert first.location.id == second.location.id
        assert _count(db, Location) == 1
        assert sorted(p.url for p in db.execute(select(Post)).scalars()) == sorted(
            [TIKTOK_URL, "https://joespizzanyc.com/"]
        )

    async def test_failed_post_write_leaves_no_location(self, session_factory, db):
        """A storage failure after the location insert rolls the location back too."""
        resolver, *_ = _resolver(session_factory)
        with pytest.raises(StorageError):
            await resolver.resolve(TIKTOK_URL, 999999)
        assert _count(db, Location) == 0
        assert _count(db, Post) == 0

    async def test_unrecognized_url_raises_without_writes(self, session_factory, db, viewer):
        """Non-http(s) input is a client error and writes nothing."""
        resolver, extractor, *_ = _resolver(session_factory)
        with pytest.raises(UnrecognizedPlatformError):
            await resolver.resolve("not a url", viewer.id)
        extractor.extract.assert_not_awaited()
        assert _count(db, Post) == 0


@pytest.mark.integration
class TestFallback:
    @pytest.mark.parametrize(
        "failure",
        [
            {"query": ""},
            {"query": ExternalServiceError("gemini", "HTTP 500")},
            {"place_id": None},
            {"place_id": httpx.ConnectTimeout("slow")},
            {"details": ExternalServiceError("places", "HTTP 403")},
        ],
    )
    async def test_any_stage_failure_yields_fallback_location(self, session_factory, db, viewer, failure):
        """Every resolution failure still attaches the post to a new invalid location."""
        resolver, *_ = _resolver(session_factory, **failure)
        result = await resolver.resolve(TIKTOK_URL, viewer.id)
        loc = result.location
        assert result.created_location is True
        assert loc.google_place_id is None
        assert loc.is_valid_location is False
        assert loc.recommendable is False
        assert loc.coordinates == (0.0, 0.0)
        assert result.post.location_id == loc.id
        assert list_saved_location_ids(db, viewer.id) == [loc.id]

    async def test_tagline_failure_after_details_uses_fallback(self, session_factory, viewer):
        """A tagline failure on the place path falls back, and the fallback tagline failing uses defaults."""
        resolver, *_ = _resolver(session_factory, tagline=ExternalServiceError("gemini", "bad answer"))
        result = await resolver.resolve(TIKTOK_URL, viewer.id)
        assert result.location.google_place_id is None
        assert result.location.description == FALLBACK_DESCRIPTION
        assert result.location.emoji == FALLBACK_EMOJI
        assert result.location.title == META.title

    async def test_metadata_failure_uses_url_metadata(self, session_factory, viewer):
        """When metadata cannot be fetched the fallback title comes from the tagline or the host."""
        resolver, _, _, generator = _resolver(
            session_factory,
            metadata=ExternalServiceError("tiktok", "oEmbed failed"),
            tagline=ExternalServiceError("gemini", "down"),
        )
        result = await resolver.resolve(TIKTOK_URL, viewer.id)
        assert result.location.title == "tiktok.com"
        generator.infer_place_query.assert_not_awaited()

    async def test_fallback_uses_generated_tagline(self, session_factory, viewer):
        """A working generator still labels the fallback location."""
        resolver, *_ = _resolver(session_factory, query="")
        result = await resolver.resolve(TIKTOK_URL, viewer.id)
        assert result.location.title == "Joe's slice"
        assert result.location.description == "New York pizza"
        assert result.location.emoji == "🍕"


@pytest.mark.integration
class TestMalformedServiceResponses:
    """External services answering 200 with a badly shaped body still end in a fallback location."""

    async def test_malformed_search_results_fall_back(self, session_factory, viewer):
        async def handler(request):
            return httpx.Response(200, json={"places": ["ChIJ-joes"]})

        extractor = AsyncMock()
        extractor.extract.return_value = META
        generator = AsyncMock()
        generator.infer_place_query.return_value = "Joe's Pizza NYC"
        generator.generate_location_details.side_effect = ExternalServiceError("gemini", "down")
        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as http:
            resolver = PostResolver(session_factory, extractor, PlacesClient(http, api_key="k"), generator)
            result = await resolver.resolve(TIKTOK_URL, viewer.id)
        assert result.location.google_place_id is None
        assert result.location.is_valid_location is False
        assert result.location.emoji == FALLBACK_EMOJI

    async def test_mistyped_page_summary_falls_back(self, session_factory, viewer):
        async def handler(request):
            return httpx.Response(200, text="<html><head><title>Joe's</title></head></html>")

        async def generate(prompt):
            if prompt.startswith("Extract from this web page"):
                return '{"title": 5, "description": "Pizza place", "thumbnailUrl": null}'
            return "Joe's slice, New York pizza, 🍕"

        llm = AsyncMock()
        llm.generate.side_effect = generate
        generator = LocationTextGenerator(llm)
        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as http:
            extractor = MetadataExtractor(http, generator=generator, sleep_fn=AsyncMock())
            resolver = PostResolver(session_factory, extractor, AsyncMock(), generator)
            result = await resolver.resolve("https://joespizzanyc.com/", viewer.id)
        assert result.location.google_place_id is None
        assert result.location.title == "Joe's slice"
        assert result.location.emoji == "🍕"

    async def test_wordy_emoji_answer_uses_default_symbol(self, session_factory, viewer):
        llm = AsyncMock()
        llm.generate.return_value = "Joe's slice, New York pizza, a slice of pizza with extra cheese"
        extractor = AsyncMock()
        extractor.extract.return_value = META
        places = AsyncMock()
        places.search_text.return_value = None
        resolver = PostResolver(session_factory, extractor, places, LocationTextGenerator(llm))
        result = await resolver.resolve(TIKTOK_URL, viewer.id)
        assert result.location.emoji == FALLBACK_EMOJI
        assert result.location.description == FALLBACK_DESCRIPTION
