"""Selector fallback chains for BeautifulSoup extraction.

Theatre sites change their markup between pages and over time, so each field
is looked up through an ordered list of CSS selectors and the first one that
yields something non-empty wins.
"""

import re
from collections.abc import Sequence

from bs4 import Tag

from showtimes.utils.text import collapse_whitespace

_BACKGROUND_URL_RE = re.compile(r"url\(\s*[\"']?(.+?)[\"']?\s*\)", re.IGNORECASE)


def select_first(node: Tag, candidates: Sequence[str]) -> list[Tag]:
    """All elements for the first selector that matches anything."""
    for selector in candidates:
        found = node.select(selector)
        if found:
            return found
    return []


def first_match(node: Tag, candidates: Sequence[str]) -> Tag | None:
    for selector in candidates:
        element = node.select_one(selector)
        if element is not None:
            return element
    return None


def first_text(node: Tag, candidates: Sequence[str]) -> str:
    """Text of the first candidate element with non-empty text."""
    for selector in candidates:
        element = node.select_one(selector)
        if element is None:
            continue
        text = collapse_whitespace(element.get_text(" "))
        if text:
            return text
    return ""


def first_attr(node: Tag, candidates: Sequence[str], attr: str) -> str | None:
    """Value of ``attr`` on the first candidate element that has it set."""
    for selector in candidates:
        element = node.select_one(selector)
        if element is None:
            continue
        value = element.get(attr)
        if isinstance(value, list):
            value = " ".join(value)
        if value:
            return value.strip()
    return None


def background_image_url(style: str | None) -> str | None:
    """Pull the URL out of an inline ``background-image: url(...)`` style."""
    if not style:
        return None
    match = _BACKGROUND_URL_RE.search(style)
    return match.group(1) if match else None


def first_background_image(node: Tag, candidates: Sequence[str]) -> str | None:
    for selector in candidates:
        element = node.select_one(selector)
        if element is None:
            continue
        url = background_image_url(element.get("style"))
        if url:
            return url
    return None
