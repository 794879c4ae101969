"""Text cleanup for scraped post titles and descriptions."""
import re

_TITLE_PREFIXES = (
    re.compile(r"^Welcome to\s+", re.IGNORECASE),
    re.compile(r"^Visit\s+", re.IGNORECASE),
)

_TITLE_SUFFIXES = (
    re.compile(r"\s*-\s*Menu.*$", re.IGNORECASE),
    re.compile(r"\s*-\s*Home.*$", re.IGNORECASE),
    re.compile(r"\s*-\s*About.*$", re.IGNORECASE),
    re.compile(r"\s*-\s*Best.*$", re.IGNORECASE),
    re.compile(r"\s*-\s*Official.*$", re.IGNORECASE),
    re.compile(r"\s*\|.*$"),
)


def clean_title(title: str | None) -> str:
    """Strip marketing prefixes ("Welcome to", "Visit") and page suffixes (" - Menu", " | ...")."""
    text = (title or "").strip()
    for pattern in _TITLE_PREFIXES:
        text = pattern.sub("", text)
    for pattern in _TITLE_SUFFIXES:
        text = pattern.sub("", text)
    return text.strip()


def clip_words(text: str | None, max_words: int = 3) -> str:
    """Keep at most max_words whitespace-separated words."""
    words = [w for w in (text or "").split() if w]
    return " ".join(words[:max_words])


def truncate(text: str, max_len: int) -> str:
    """Cut text to fit a column of max_len characters."""
    text = text.strip()
    return text if len(text) <= max_len else text[: max_len - 1].rstrip() + "…"
