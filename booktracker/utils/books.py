"""
Pure helpers for book data.

These run at the service boundary (and inside response schemas) instead of
as ORM lifecycle hooks, so every normalization step is visible at the call
site and testable without a database.
"""

from collections.abc import Iterable
from typing import Any

DEFAULT_PAGE = 1
DEFAULT_LIMIT = 10
MAX_LIMIT = 100

STATUS_DISPLAY = {
    "want-to-read": "Want to Read",
    "reading": "Reading",
    "completed": "Completed",
}


def sanitize_tags(tags: Iterable[Any] | None) -> list[str]:
    """
    Normalize a tag list: trim, lowercase, drop empties and duplicates.

    Non-string entries are dropped. The first occurrence of a tag keeps its
    position.

    Example:
        >>> sanitize_tags(["Fiction", " fiction ", "sci-fi", ""])
        ['fiction', 'sci-fi']
    """
    if tags is None:
        return []

    cleaned: list[str] = []
    seen: set[str] = set()
    for tag in tags:
        if not isinstance(tag, str):
            continue
        name = tag.strip().lower()
        if not name or name in seen:
            continue
        seen.add(name)
        cleaned.append(name)
    return cleaned


def normalize_tag(tag: str | None) -> str | None:
    """Trimmed, lowercase form of a tag filter, or None if nothing is left."""
    if tag is None:
        return None
    name = tag.strip().lower()
    return name or None


def normalize_pagination(page: int | None, limit: int | None) -> tuple[int, int]:
    """
    Clamp pagination input to usable values.

    - page defaults to 1 and is floored at 1
    - limit defaults to 10 and is clamped to [1, 100]

    Example:
        >>> normalize_pagination(0, 500)
        (1, 100)
    """
    valid_page = DEFAULT_PAGE if page is None else max(1, page)
    valid_limit = DEFAULT_LIMIT if limit is None else min(MAX_LIMIT, max(1, limit))
    return valid_page, valid_limit


def status_display(status: str) -> str:
    """Human-readable name of a reading status."""
    return STATUS_DISPLAY.get(status, status)


def escape_like(term: str, escape_char: str = "\\") -> str:
    """Escape LIKE wildcards so a search term matches literally."""
    return (
        term.replace(escape_char, escape_char * 2)
        .replace("%", f"{escape_char}%")
        .replace("_", f"{escape_char}_")
    )
