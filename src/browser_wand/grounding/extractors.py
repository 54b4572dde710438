"""Opportunistic field extraction from search-result titles."""

import re

# Tried in order; the first match wins.
PRICE_PATTERNS = (
    re.compile(r"[$¥€£₹₩₱]\s?\d[\d,]*(?:\.\d+)?"),
    re.compile(
        r"\b(?:RM|SGD|USD|EUR|GBP|JPY|CNY|KRW|INR|THB|VND|PHP|IDR)\s*\d[\d,]*(?:\.\d+)?",
        re.IGNORECASE,
    ),
    re.compile(
        r"\b\d[\d,]*(?:\.\d+)?\s*(?:RM|SGD|USD|EUR|GBP|JPY|CNY|KRW|INR|THB|VND|PHP|IDR)\b",
        re.IGNORECASE,
    ),
)

_MONTH = (
    r"(?:Jan(?:uary)?|Feb(?:ruary)?|Mar(?:ch)?|Apr(?:il)?|May|June?|July?|"
    r"Aug(?:ust)?|Sep(?:t(?:ember)?)?|Oct(?:ober)?|Nov(?:ember)?|Dec(?:ember)?)"
)

DATE_PATTERNS = (
    re.compile(r"\b\d{4}-\d{2}-\d{2}\b"),
    re.compile(rf"\b{_MONTH}\.?\s+\d{{1,2}}(?:st|nd|rd|th)?,?\s+\d{{4}}\b", re.IGNORECASE),
    re.compile(rf"\b\d{{1,2}}\s+{_MONTH}\.?,?\s+\d{{4}}\b", re.IGNORECASE),
    re.compile(rf"\b{_MONTH}\.?\s+\d{{4}}\b", re.IGNORECASE),
)

# " - Amazon.com", " | The Verge", " – BBC News" at the end of a title.
_SITE_SUFFIX_RE = re.compile(r"\s+[|\-–—:]\s+[^|\-–—]{1,60}$")


def _first_match(patterns: tuple[re.Pattern[str], ...], text: str) -> str:
    for pattern in patterns:
        match = pattern.search(text)
        if match:
            return match.group(0).strip()
    return ""


def extract_price(text: str) -> str:
    """Return the first price-looking substring, or ""."""
    return _first_match(PRICE_PATTERNS, text or "")


def extract_date(text: str) -> str:
    """Return the first date-looking substring, or ""."""
    return _first_match(DATE_PATTERNS, text or "")


def strip_site_suffix(title: str) -> str:
    """Drop one trailing site-name segment from a page title.

    The title is returned unchanged if stripping would leave nothing.
    """
    title = (title or "").strip()
    stripped = _SITE_SUFFIX_RE.sub("", title).strip()
    return stripped or title
