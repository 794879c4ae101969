"""LLM-backed steps: place-query inference, tagline/emoji generation and HTML summarizing."""
from __future__ import annotations

import json
import logging
import re
from typing import Optional, Protocol

from location_core.errors import ExternalServiceError
from location_core.types import PlaceDetails, PostMetadata, Tagline
from models.location import EMOJI_MAX_LEN
from utils.text import clean_title, clip_words

LOG = logging.getLogger(__name__)

# Keep prompts under the model's input budget.
MAX_HTML_CHARS = 50_000

_CODE_FENCE = re.compile(r"```(?:json)?\s*(\{[\s\S]*\})\s*```")


class TextGenerator(Protocol):
    async def generate(self, prompt: str) -> str: ...


def build_place_query_prompt(metadata: PostMetadata) -> str:
    hint = metadata.location_hint or "N/A"
    return f"""
You decide whether a social media post refers to one specific real-world business or place.
Be strict: when the post does not clearly name a real place, answer with an empty string.

Post title: {metadata.title}
Post description: {metadata.description or "N/A"}
Author: {metadata.author_name}
Author URL: {metadata.author_url or "N/A"}
Location tag: {hint}

Answer with an empty string if any of these hold:
- there is no business name, place keyword or category in the text
- the post is a meme, trend, opinion or personal content not tied to a place
- the author looks like a personal username rather than a venue
- more than one place could be meant
- you are less than 80% confident which place it is

Otherwise answer with a concise Google Places text search query: the business name,
its category if known and any city or neighborhood mentioned. Never guess or invent a place.
Return only the query text.
""".strip()


def build_location_details_prompt(metadata: PostMetadata, place: Optional[PlaceDetails] = None) -> str:
    place_block = ""
    if place is not None:
        place_block = f"""
Google Place information:
Name: {place.name}
Address: {place.address or "N/A"}
Summary: {place.summary or "N/A"}
"""
    return f"""
You write short labels for places saved from social media posts.
Given the post{" and the Google Place information" if place else ""}, produce a title, a description and one emoji.

Post title: {metadata.title}
Author: {metadata.author_name}
{place_block}
Rules:
1. Title: 2-5 words describing the post{" and the place" if place else ""}. If the post is not about a real place,
   describe the kind of content instead and lean on the author's name.
2. Description: 2-4 words on what is featured, with no punctuation at all.
3. Emoji: exactly one, matching the food, drink, product or activity shown.
4. Never invent places, menu items or businesses; fall back to generic descriptors.

Examples:
Homemade pasta recipe, Homemade pasta, 🍝
Strawberry matcha latte, Japanese inspired cafe, 🍵

Respond with only: title, description, emoji
""".strip()


def build_html_summary_prompt(html: str, url: str) -> str:
    return f"""
Extract from this web page its title, a short description and its main image URL.

Page URL: {url}
HTML (truncated):
{html[:MAX_HTML_CHARS]}

Title: if the page is a business or place, only its name (e.g. "Joe's Pizza"), 1-5 words,
without words like Menu, Home, About, Welcome to or Visit.
Description: 2-3 words naming the kind of page or business (e.g. "Italian restaurant"), or "".
thumbnailUrl: the main image URL or null.

Return only JSON: {{"title": "...", "description": "...", "thumbnailUrl": null}}
""".strip()


def parse_tagline(text: str) -> Tagline:
    """Parse "title, description, emoji". Extra commas are kept in the title."""
    parts = [p.strip() for p in text.strip().strip('"').split(", ")]
    if len(parts) < 3 or not all(parts[-3:]):
        raise ExternalServiceError("gemini", f"unparseable location details: {text[:120]!r}")
    # The emoji segment has to fit the location.emoji column.
    if len(parts[-1]) > EMOJI_MAX_LEN or " " in parts[-1]:
        raise ExternalServiceError("gemini", f"emoji segment is not a single symbol: {parts[-1][:40]!r}")
    title = ", ".join(parts[:-2])
    return Tagline(title=title, description=parts[-2], emoji=parts[-1])


def parse_html_summary(text: str) -> dict:
    match = _CODE_FENCE.search(text)
    payload = match.group(1) if match else text
    try:
        parsed = json.loads(payload)
    except ValueError as e:
        raise ExternalServiceError("gemini", "page summary is not JSON") from e
    if not isinstance(parsed, dict):
        raise ExternalServiceError("gemini", "page summary is not an object")
    for key in ("title", "description", "thumbnailUrl"):
        if parsed.get(key) is not None and not isinstance(parsed[key], str):
            raise ExternalServiceError("gemini", f"page summary {key} is not a string")
    return {
        "title": clean_title(parsed.get("title")),
        "description": clip_words(parsed.get("description"), 3),
        "thumbnail_url": parsed.get("thumbnailUrl") or None,
    }


class LocationTextGenerator:
    """The three LLM-backed operations the resolver and metadata extractor need."""

    def __init__(self, llm: TextGenerator) -> None:
        self._llm = llm

    async def infer_place_query(self, metadata: PostMetadata) -> str:
        """Search query for the place, or "" when the model has no confident guess."""
        answer = await self._llm.generate(build_place_query_prompt(metadata))
        query = answer.strip().strip('"').strip("'").strip()
        LOG.info("Place query for %r: %r", metadata.title[:60], query)
        return query

    async def generate_location_details(
        self,
        metadata: PostMetadata,
        place: Optional[PlaceDetails] = None,
    ) -> Tagline:
        answer = await self._llm.generate(build_location_details_prompt(metadata, place))
        return parse_tagline(answer)

    async def summarize_html(self, html: str, url: str) -> dict:
        """Title/description/thumbnail for a page whose Open Graph tags are incomplete."""
        answer = await self._llm.generate(build_html_summary_prompt(html, url))
        if not answer:
            raise ExternalServiceError("gemini", "empty page summary")
        return parse_html_summary(answer)
