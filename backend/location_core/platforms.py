"""Classify a shared URL by the platform it points at. Pure, no I/O."""
from enum import Enum
from typing import Optional
from urllib.parse import urlparse

_TIKTOK_HOSTS = ("tiktok.com",)
_INSTAGRAM_HOSTS = ("instagram.com", "instagr.am")


class PostPlatform(str, Enum):
    TIKTOK = "tiktok"
    INSTAGRAM = "instagram"
    WEBPAGE = "webpage"


def _host_matches(host: str, domains: tuple[str, ...]) -> bool:
    return any(host == d or host.endswith("." + d) for d in domains)


def detect_platform(url: str) -> Optional[PostPlatform]:
    """Return the platform for url, or None when it is not an http(s) URL with a host."""
    try:
        parsed = urlparse(url.strip())
    except ValueError:
        return None
    if parsed.scheme.lower() not in ("http", "https"):
        return None
    host = (parsed.hostname or "").lower()
    if not host or "." not in host:
        return None
    if _host_matches(host, _TIKTOK_HOSTS):
        return PostPlatform.TIKTOK
    if _host_matches(host, _INSTAGRAM_HOSTS):
        return PostPlatform.INSTAGRAM
    return PostPlatform.WEBPAGE
