"""Unit tests: title and description cleanup helpers."""
import pytest

from utils.geo import haversine_km
from utils.text import clean_title, clip_words, truncate

pytestmark = pytest.mark.unit


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("Welcome to Joe's Pizza", "Joe's Pizza"),
        ("Visit Blue Bottle Coffee", "Blue Bottle Coffee"),
        ("Joe's Pizza - Menu", "Joe's Pizza"),
        ("Joe's Pizza - Official Site", "Joe's Pizza"),
        ("Joe's Pizza | Best slice in NYC", "Joe's Pizza"),
        ("Welcome to Joe's Pizza - Home | NYC", "Joe's Pizza"),
        ("  Plain Title  ", "Plain Title"),
    ],
)
def test_clean_title(raw, expected):
    """Marketing prefixes and page suffixes are stripped."""
    assert clean_title(raw) == expected


def test_clean_title_none():
    """None becomes an empty string."""
    assert clean_title(None) == ""


def test_clip_words():
    """Only the first max_words words are kept."""
    assert clip_words("Authentic Neapolitan pizza since 1975", 3) == "Authentic Neapolitan pizza"
    assert clip_words("  two   words ", 3) == "two words"
    assert clip_words(None) == ""


def test_truncate():
    """Long text is cut with an ellipsis to exactly max_len characters."""
    assert truncate("short", 10) == "short"
    out = truncate("x" * 150, 100)
    assert len(out) == 100
    assert out.endswith("…")


def test_haversine_known_distance():
    """Distance between two Manhattan points is about 1 km; identical points are 0."""
    assert haversine_km((40.7128, -74.0060), (40.7128, -74.0060)) == 0
    d = haversine_km((40.7484, -73.9857), (40.7580, -73.9855))
    assert 1.0 < d < 1.1
