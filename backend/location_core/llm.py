"""Gemini generateContent client used for every text-generation call."""
import logging
from typing import Any

import httpx

from location_core.errors import ExternalServiceError

LOG = logging.getLogger(__name__)

GEMINI_URL = "https://generativelanguage.googleapis.com/v1beta/models/{model}:generateContent"

_SERVICE = "gemini"


def _first_candidate_text(data: Any) -> str:
    """Text of the first candidate's first part, trimmed; "" when the response carries none."""
    try:
        text = data["candidates"][0]["content"]["parts"][0].get("text")
    except (KeyError, IndexError, TypeError, AttributeError):
        return ""
    return text.strip() if isinstance(text, str) else ""


class GeminiClient:
    """Send one prompt, get one text answer. Timeouts come from the shared httpx client."""

    def __init__(self, http: httpx.AsyncClient, *, api_key: str, model: str) -> None:
        self._http = http
        self._api_key = api_key
        self._url = GEMINI_URL.format(model=model)

    async def generate(self, prompt: str) -> str:
        """Return the generated text. Raises ExternalServiceError on transport or HTTP failure."""
        if not self._api_key:
            raise ExternalServiceError(_SERVICE, "GEMINI_API_KEY is not set")
        try:
            response = await self._http.post(
                self._url,
                headers={"X-goog-api-key": self._api_key, "Content-Type": "application/json"},
                json={"contents": [{"parts": [{"text": prompt}]}]},
            )
        except httpx.HTTPError as e:
            raise ExternalServiceError(_SERVICE, f"request failed: {e!r}") from e
        if response.status_code >= 400:
            raise ExternalServiceError(_SERVICE, f"HTTP {response.status_code}: {response.text[:200]}")
        try:
            data = response.json()
        except ValueError as e:
            raise ExternalServiceError(_SERVICE, "response is not JSON") from e
        return _first_candidate_text(data)
