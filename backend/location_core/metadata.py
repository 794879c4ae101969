"""Fetch and normalize post metadata: TikTok oEmbed, Open Graph scraping, LLM page summary."""
from __future__ import annotations

import asyncio
import json
import logging
import re
from typing import Any, Awaitable, Callable, Optional
from urllib.parse import urlparse

import httpx
from bs4 import BeautifulSoup

from location_core.errors import ExternalServiceError
from location_core.inference import LocationTextGenerator
from location_core.platforms import PostPlatform
from location_core.types import PostMetadata
from utils.config import TIKTOK_RETRY_BACKOFF_S
from utils.text import clean_title, clip_words

LOG = logging.getLogger(__name__)

TIKTOK_OEMBED_URL = "https://www.tiktok.com/oembed"
TIKTOK_MOBILE_URL = "https://m.tiktok.com/v/{video_id}.html"
TIKTOK_PLAYER_URL = (
    "https://www.tiktok.com/player/v1/{video_id}?loop=1&autoplay=1&controls=0&volume_control=1"
    "&description=0&rel=0&native_context_menu=0&closed_caption=0&progress_bar=0&timestamp=0"
)

BROWSER_HEADERS = {
    "User-Agent": "Mozilla/5.0 (iPhone; CPU iPhone OS 17_0 like Mac OS X) AppleWebKit/605.1.15 Mobile/15E148",
    "Accept-Language": "en-US,en;q=0.9",
}

_VIDEO_ID_PATTERNS = (
    re.compile(r"/(?:video|photo)/(\d+)"),
    re.compile(r"/v/(\d+)\.html"),
)
_INSTAGRAM_TITLE = re.compile(r"^(?P<author>[^:]+) on Instagram:\s*(?P<caption>.*)$", re.DOTALL)
_LOCATION_HINT = re.compile(r"\b(?:at|in|from)\s+([A-Z][\w'&.]*(?:\s+[A-Z][\w'&.]*)*)")

SleepFn = Callable[[float], Awaitable[None]]


def _is_retryable(status_code: int) -> bool:
    return status_code == 429 or status_code >= 500


def extract_tiktok_video_id(url: str) -> Optional[str]:
    """Numeric video id from /video/<id>, /photo/<id> or /v/<id>.html URLs. Short links (/t/...) give None."""
    for pattern in _VIDEO_ID_PATTERNS:
        match = pattern.search(url)
        if match:
            return match.group(1)
    return None


def tiktok_embed_url(video_id: str) -> str:
    return TIKTOK_PLAYER_URL.format(video_id=video_id)


def _str_fields(service: str, data: dict[str, Any], *keys: str) -> dict[str, Optional[str]]:
    """Pick string fields from a JSON object; a present non-string value is a malformed response."""
    picked = {}
    for key in keys:
        value = data.get(key)
        if value is not None and not isinstance(value, str):
            raise ExternalServiceError(service, f"{key} is not a string")
        picked[key] = value or None
    return picked


def _object_field(service: str, data: dict[str, Any], key: str) -> dict[str, Any]:
    value = data.get(key) or {}
    if not isinstance(value, dict):
        raise ExternalServiceError(service, f"{key} is not an object")
    return value


def parse_meta_tags(html: str) -> dict[str, str]:
    """Collect og:* properties and the author / twitter:site names from a page's <meta> tags."""
    soup = BeautifulSoup(html, "html.parser")
    tags: dict[str, str] = {}
    for meta in soup.find_all("meta"):
        key = meta.get("property") or meta.get("name")
        content = meta.get("content")
        if not key or content is None:
            continue
        key = key.strip().lower()
        if key.startswith("og:") or key in ("author", "twitter:site"):
            tags.setdefault(key, content.strip())
    return tags


def author_from_tags(tags: dict[str, str], url: str) -> str:
    """Site or author name: og:site_name, author, twitter:site, then the bare hostname."""
    for key in ("og:site_name", "author"):
        if tags.get(key):
            return tags[key]
    if tags.get("twitter:site"):
        return tags["twitter:site"].lstrip("@")
    host = urlparse(url).hostname or ""
    return host.removeprefix("www.") or "Unknown"


def split_instagram_title(og_title: str) -> tuple[str, str]:
    """'AUTHOR on Instagram: caption' -> (AUTHOR, caption)."""
    match = _INSTAGRAM_TITLE.match(og_title.strip())
    if not match:
        return "Unknown", og_title.strip()
    return match.group("author").strip() or "Unknown", match.group("caption").strip().strip('"')


def location_hint_from_text(text: str) -> Optional[str]:
    match = _LOCATION_HINT.search(text or "")
    return match.group(1).strip() if match else None


def metadata_from_url(url: str) -> PostMetadata:
    """Minimal metadata for a URL whose post could not be fetched."""
    host = (urlparse(url).hostname or "").removeprefix("www.")
    return PostMetadata(title=host or "Shared post", author_name=host or "Unknown")


class MetadataExtractor:
    """Platform-specific metadata retrieval. Every failure surfaces as ExternalServiceError."""

    def __init__(
        self,
        http: httpx.AsyncClient,
        generator: Optional[LocationTextGenerator] = None,
        *,
        retry_backoff_s: float = TIKTOK_RETRY_BACKOFF_S,
        sleep_fn: SleepFn = asyncio.sleep,
    ) -> None:
        self._http = http
        self._generator = generator
        self._retry_backoff_s = retry_backoff_s
        self._sleep = sleep_fn

    async def extract(self, url: str, platform: PostPlatform) -> PostMetadata:
        if platform is PostPlatform.TIKTOK:
            return await self._tiktok(url)
        if platform is PostPlatform.INSTAGRAM:
            return await self._instagram(url)
        return await self._webpage(url)

    # -- TikTok -------------------------------------------------------------

    async def _fetch_oembed(self, url: str) -> dict[str, Any]:
        """oEmbed call with a single retry after a fixed backoff on 429/5xx or transport errors."""
        last_error = "no attempt"
        for attempt in (1, 2):
            try:
                response = await self._http.get(TIKTOK_OEMBED_URL, params={"url": url})
            except httpx.TransportError as e:
                last_error = repr(e)
            else:
                if response.status_code < 400:
                    try:
                        data = response.json()
                    except ValueError as e:
                        raise ExternalServiceError("tiktok", "oEmbed response is not JSON") from e
                    if not isinstance(data, dict):
                        raise ExternalServiceError("tiktok", "oEmbed response is not an object")
                    return data
                last_error = f"HTTP {response.status_code}"
                if not _is_retryable(response.status_code):
                    break
            if attempt == 1:
                LOG.info("TikTok oEmbed failed (%s), retrying in %.1fs", last_error, self._retry_backoff_s)
                await self._sleep(self._retry_backoff_s)
        raise ExternalServiceError("tiktok", f"oEmbed failed: {last_error}")

    async def _tiktok(self, url: str) -> PostMetadata:
        try:
            data = await self._fetch_oembed(url)
        except ExternalServiceError as e:
            LOG.warning("TikTok oEmbed unavailable for %s (%s); trying mobile page", url, e)
            return await self._tiktok_mobile_page(url)
        fields = _str_fields("tiktok", data, "title", "author_name", "author_url", "thumbnail_url", "embed_product_id")
        return PostMetadata(
            title=fields["title"] or "",
            author_name=fields["author_name"] or "Unknown",
            author_url=fields["author_url"],
            thumbnail_url=fields["thumbnail_url"],
            video_id=fields["embed_product_id"] or extract_tiktok_video_id(url),
        )

    async def _tiktok_mobile_page(self, url: str) -> PostMetadata:
        """Read the rehydration JSON embedded in the mobile page; it also carries the creator's location tag."""
        video_id = extract_tiktok_video_id(url)
        if not video_id:
            raise ExternalServiceError("tiktok", f"no video id in {url!r}")
        html = await self._fetch_html(TIKTOK_MOBILE_URL.format(video_id=video_id))
        soup = BeautifulSoup(html, "html.parser")
        script = soup.find("script", id="__UNIVERSAL_DATA_FOR_REHYDRATION__")
        if script is None or not script.string:
            raise ExternalServiceError("tiktok", "rehydration data missing from mobile page")
        try:
            data = json.loads(script.string)
            item = data["__DEFAULT_SCOPE__"]["webapp.video-detail"]["itemInfo"]["itemStruct"]
        except (ValueError, KeyError, TypeError) as e:
            raise ExternalServiceError("tiktok", f"unexpected mobile page data: {e!r}") from e
        if not isinstance(item, dict):
            raise ExternalServiceError("tiktok", "unexpected mobile page data: item is not an object")
        author = _str_fields("tiktok", _object_field("tiktok", item, "author"), "uniqueId", "nickname")
        video = _str_fields("tiktok", _object_field("tiktok", item, "video"), "cover", "originCover")
        fields = _str_fields("tiktok", item, "desc", "locationCreated")
        unique_id = author["uniqueId"]
        return PostMetadata(
            title=fields["desc"] or "",
            author_name=author["nickname"] or unique_id or "Unknown",
            author_url=f"https://www.tiktok.com/@{unique_id}" if unique_id else None,
            thumbnail_url=video["cover"] or video["originCover"],
            location_hint=fields["locationCreated"],
            video_id=video_id,
        )

    # -- Open Graph ---------------------------------------------------------

    async def _fetch_html(self, url: str) -> str:
        try:
            response = await self._http.get(url, headers=BROWSER_HEADERS)
        except httpx.HTTPError as e:
            raise ExternalServiceError("scraper", f"fetching {url} failed: {e!r}") from e
        if response.status_code >= 400:
            raise ExternalServiceError("scraper", f"fetching {url} returned HTTP {response.status_code}")
        return response.text

    async def _summarize(self, html: str, url: str) -> dict:
        if self._generator is None:
            raise ExternalServiceError("scraper", f"incomplete Open Graph tags on {url}")
        LOG.info("Open Graph tags incomplete for %s, falling back to page summary", url)
        return await self._generator.summarize_html(html, url)

    async def _instagram(self, url: str) -> PostMetadata:
        html = await self._fetch_html(url)
        tags = parse_meta_tags(html)
        if tags.get("og:title") and tags.get("og:description"):
            author, caption = split_instagram_title(tags["og:title"])
            description = tags["og:description"]
            return PostMetadata(
                title=caption,
                author_name=author,
                thumbnail_url=tags.get("og:image"),
                description=description,
                location_hint=location_hint_from_text(description),
            )
        summary = await self._summarize(html, url)
        return PostMetadata(
            title=summary["title"],
            author_name=author_from_tags(tags, url),
            thumbnail_url=summary["thumbnail_url"],
            description=summary["description"],
        )

    async def _webpage(self, url: str) -> PostMetadata:
        html = await self._fetch_html(url)
        tags = parse_meta_tags(html)
        if tags.get("og:title") and tags.get("og:description") and tags.get("og:image"):
            title = clean_title(tags["og:title"])
            description = clip_words(tags["og:description"], 3)
            thumbnail_url = tags["og:image"]
        else:
            summary = await self._summarize(html, url)
            title, description, thumbnail_url = summary["title"], summary["description"], summary["thumbnail_url"]
        return PostMetadata(
            title=title,
            author_name=author_from_tags(tags, url),
            thumbnail_url=thumbnail_url,
            description=description,
        )
