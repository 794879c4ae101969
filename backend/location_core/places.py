"""Google Places (v1) text search and place details."""
import logging
from typing import Any, Optional

import httpx

from location_core.errors import ExternalServiceError
from location_core.types import PlaceDetails

LOG = logging.getLogger(__name__)

SEARCH_URL = "https://places.googleapis.com/v1/places:searchText"
DETAILS_URL = "https://places.googleapis.com/v1/places/{place_id}"
DETAILS_FIELD_MASK = "id,displayName,formattedAddress,location,nationalPhoneNumber,websiteUri,generativeSummary"

_SERVICE = "places"


def _optional_str(data: dict[str, Any], key: str) -> Optional[str]:
    value = data.get(key)
    if value is not None and not isinstance(value, str):
        raise ExternalServiceError(_SERVICE, f"{key} is not a string")
    return value or None


def parse_place_details(data: dict[str, Any]) -> PlaceDetails:
    """
    Build PlaceDetails from a Places details response.
    Raises ExternalServiceError if id, name or location is missing or mistyped.
    """
    try:
        place_id = data["id"]
        name = data["displayName"]["text"]
        latitude = float(data["location"]["latitude"])
        longitude = float(data["location"]["longitude"])
    except (KeyError, TypeError, ValueError) as e:
        raise ExternalServiceError(_SERVICE, f"incomplete place details: {e!r}") from e
    if not isinstance(place_id, str) or not isinstance(name, str) or not place_id or not name:
        raise ExternalServiceError(_SERVICE, "place id and name must be non-empty strings")
    summary = data.get("generativeSummary")
    summary = summary.get("overview") if isinstance(summary, dict) else None
    if isinstance(summary, dict):
        summary = summary.get("text")
    return PlaceDetails(
        place_id=place_id,
        name=name,
        coordinates=(latitude, longitude),
        address=_optional_str(data, "formattedAddress"),
        phone_number=_optional_str(data, "nationalPhoneNumber"),
        website_url=_optional_str(data, "websiteUri"),
        summary=summary if isinstance(summary, str) else None,
    )


class PlacesClient:
    """Metered API: callers rely on the location table to avoid repeat details lookups."""

    def __init__(self, http: httpx.AsyncClient, *, api_key: str) -> None:
        self._http = http
        self._api_key = api_key

    async def _request(self, method: str, url: str, *, field_mask: str, json: Optional[dict] = None) -> Any:
        if not self._api_key:
            raise ExternalServiceError(_SERVICE, "GOOGLE_PLACES_API_KEY is not set")
        try:
            response = await self._http.request(
                method,
                url,
                headers={"X-Goog-Api-Key": self._api_key, "X-Goog-FieldMask": field_mask},
                json=json,
            )
        except httpx.HTTPError as e:
            raise ExternalServiceError(_SERVICE, f"request failed: {e!r}") from e
        if response.status_code >= 400:
            raise ExternalServiceError(_SERVICE, f"HTTP {response.status_code}: {response.text[:200]}")
        try:
            return response.json()
        except ValueError as e:
            raise ExternalServiceError(_SERVICE, "response is not JSON") from e

    async def search_text(self, query: str) -> Optional[str]:
        """Return the id of the top-ranked place for query, or None when nothing matched."""
        data = await self._request("POST", SEARCH_URL, field_mask="places.id", json={"textQuery": query})
        places = data.get("places") if isinstance(data, dict) else None
        if not places:
            return None
        if not isinstance(places, list) or not isinstance(places[0], dict):
            raise ExternalServiceError(_SERVICE, "unexpected search results shape")
        place_id = places[0].get("id")
        if place_id is not None and not isinstance(place_id, str):
            raise ExternalServiceError(_SERVICE, "place id is not a string")
        return place_id or None

    async def get_details(self, place_id: str) -> PlaceDetails:
        data = await self._request("GET", DETAILS_URL.format(place_id=place_id), field_mask=DETAILS_FIELD_MASK)
        if not isinstance(data, dict):
            raise ExternalServiceError(_SERVICE, "place details is not an object")
        return parse_place_details(data)
