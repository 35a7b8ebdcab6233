"""Text utilities for listing titles, tags and URLs."""

import html
import re
from urllib.parse import urljoin

FORMATS = ("Digital", "16mm", "35mm", "70mm", "VHS")
DEFAULT_FORMAT = "Digital"

OPEN_CAPTIONS = "Open Captions"
SPECIAL_GUEST = "Special Guest"

_GAUGE_SUFFIX_RE = re.compile(r"\s+in\s+(35mm|16mm|70mm)\s*$", re.IGNORECASE)
_GUEST_SUFFIX_RE = re.compile(r"\s+with\s+.+$", re.IGNORECASE)
_OPEN_CAPTION_SUFFIX_RE = re.compile(r"\s*\(open caption\)\s*$", re.IGNORECASE)

# Applied in this order; several suffixes can appear on one title
_TITLE_SUFFIXES = (_GAUGE_SUFFIX_RE, _GUEST_SUFFIX_RE, _OPEN_CAPTION_SUFFIX_RE)

# Free-text attribute token → (field, vocabulary entry). Matched as a
# case-sensitive substring, the way the sites print them.
ATTRIBUTE_VOCABULARY: tuple[tuple[str, str, str], ...] = (
    ("OPEN CAPS", "accessibility", OPEN_CAPTIONS),
    ("Open Caption", "accessibility", OPEN_CAPTIONS),
    ("Audio Description", "accessibility", "Audio Description"),
    ("EARLY BIRD", "discount", "Early Bird Pricing"),
    ("29% off", "discount", "29% off"),
    ("Special Screening", "discount", "Special Screening"),
)


def collapse_whitespace(text: str) -> str:
    """Collapse runs of whitespace (including newlines) to single spaces."""
    return re.sub(r"\s+", " ", text or "").strip()


def clean_title(title: str) -> str:
    """
    Strip presentation suffixes from a listing title.

    - Film gauge: "Jaws in 35mm" → "Jaws"
    - Guest: "Stop Making Sense with David Byrne" → "Stop Making Sense"
    - Captions: "Rocky Horror Picture Show (open caption)" → "Rocky Horror Picture Show"

    Repeats until nothing changes, so cleaning is idempotent even when the
    suffixes are stacked in an unusual order.
    """
    cleaned = collapse_whitespace(title)
    while True:
        previous = cleaned
        for pattern in _TITLE_SUFFIXES:
            cleaned = pattern.sub("", cleaned).strip()
        if cleaned == previous:
            return cleaned


def film_gauge(title: str) -> str | None:
    """Return "35mm"/"16mm"/"70mm" when the title advertises a print."""
    match = re.search(r"\bin\s+(35mm|16mm|70mm)\b", title or "", re.IGNORECASE)
    return match.group(1).lower() if match else None


def has_guest_suffix(title: str) -> bool:
    return bool(_GUEST_SUFFIX_RE.search(collapse_whitespace(title)))


def has_open_captions(title: str) -> bool:
    return bool(_OPEN_CAPTION_SUFFIX_RE.search(collapse_whitespace(title)))


def infer_format(title: str, attributes: list[str] | None = None) -> str:
    """Infer the presentation format from the raw title, then the attributes."""
    gauge = film_gauge(title)
    if gauge:
        return gauge

    for attribute in attributes or []:
        match = re.search(r"\b(35|16|70)\s?mm\b", attribute, re.IGNORECASE)
        if match:
            return f"{match.group(1)}mm"
        if re.search(r"\bVHS\b", attribute, re.IGNORECASE):
            return "VHS"

    return DEFAULT_FORMAT


def infer_tags(title: str, attributes: list[str] | None = None) -> tuple[list[str], list[str]]:
    """
    Map the raw title and free-text attributes onto the fixed vocabularies.

    Returns:
        (accessibility, discount), each ordered and without duplicates
    """
    accessibility: list[str] = []
    discount: list[str] = []
    fields = {"accessibility": accessibility, "discount": discount}

    if has_open_captions(title):
        accessibility.append(OPEN_CAPTIONS)

    for attribute in attributes or []:
        for token, field, label in ATTRIBUTE_VOCABULARY:
            if token in attribute and label not in fields[field]:
                fields[field].append(label)

    if has_guest_suffix(title) and SPECIAL_GUEST not in discount:
        discount.append(SPECIAL_GUEST)

    return accessibility, discount


def decode_entities(value: str | None) -> str:
    """Decode HTML entities (``&amp;``, ``&#39;``...) left in attribute values."""
    if not value:
        return ""
    return html.unescape(value)


def absolute_url(url: str | None, base_url: str = "") -> str:
    """
    Decode and absolutise an image or link URL.

    Returns an empty string for missing URLs and for inline ``data:``
    placeholders that lazy-loading pages put in ``src``.
    """
    decoded = decode_entities(url).strip()
    if not decoded or decoded.startswith("data:"):
        return ""
    if decoded.startswith("//"):
        return f"https:{decoded}"
    if base_url:
        return urljoin(base_url, decoded)
    return decoded


def slugify(text: str) -> str:
    """
    Convert text to a URL-safe slug.

    Args:
        text: Text to slugify

    Returns:
        Lowercase slug with hyphens
    """
    # Convert to lowercase
    text = text.lower()

    # Replace spaces and underscores with hyphens
    text = re.sub(r"[\s_]+", "-", text)

    # Remove non-alphanumeric characters (except hyphens)
    text = re.sub(r"[^a-z0-9-]", "", text)

    # Remove multiple consecutive hyphens
    text = re.sub(r"-+", "-", text)

    # Strip leading/trailing hyphens
    text = text.strip("-")

    return text
