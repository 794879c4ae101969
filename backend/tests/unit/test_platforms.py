"""Unit tests: platform detection for shared URLs."""
import pytest

from location_core.platforms import PostPlatform, detect_platform

pytestmark = pytest.mark.unit


@pytest.mark.parametrize(
    "url",
    [
        "https://www.tiktok.com/@cafe/video/7301234567890123456",
        "https://vm.tiktok.com/ZMabc123/",
        "https://m.tiktok.com/v/7301234567890123456.html",
    ],
)
def test_tiktok_urls(url):
    """TikTok hosts and subdomains are detected as TikTok."""
    assert detect_platform(url) is PostPlatform.TIKTOK


@pytest.mark.parametrize(
    "url",
    [
        "https://www.instagram.com/p/Cx1abcDEF/",
        "https://instagram.com/reel/Cx1abcDEF/",
        "http://instagr.am/p/Cx1abcDEF/",
    ],
)
def test_instagram_urls(url):
    """Instagram hosts (including instagr.am) are detected as Instagram."""
    assert detect_platform(url) is PostPlatform.INSTAGRAM


def test_other_sites_are_webpages():
    """Any other http(s) host is a generic webpage."""
    assert detect_platform("https://joespizza.com/menu") is PostPlatform.WEBPAGE
    assert detect_platform("https://nottiktok.com/video/1") is PostPlatform.WEBPAGE


@pytest.mark.parametrize(
    "url",
    ["", "not a url", "ftp://tiktok.com/video/1", "https://", "https://localhost/page", "tiktok.com/@a/video/1"],
)
def test_unrecognized_urls(url):
    """Non-http(s) URLs and URLs without a dotted host are not recognized."""
    assert detect_platform(url) is None


def test_surrounding_whitespace_ignored():
    """Leading and trailing whitespace does not affect detection."""
    assert detect_platform("  https://www.tiktok.com/@a/video/1  ") is PostPlatform.TIKTOK
