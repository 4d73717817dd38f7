from __future__ import annotations

import re

_NON_WORD = re.compile(r"[^\w\s-]")
_SPACES = re.compile(r"[\s_]+")


def heading_slug(text: str) -> str:
    """Return a stable anchor slug for a heading title."""
    cleaned = _NON_WORD.sub("", (text or "").strip().lower())
    slug = _SPACES.sub("-", cleaned).strip("-")
    return slug or "heading"


def unique_heading_slug(text: str, seen: dict[str, int]) -> str:
    """Slug for ``text``, suffixed ``-1``, ``-2``... when already used in ``seen``."""
    base = heading_slug(text)
    count = seen.get(base, 0)
    seen[base] = count + 1
    return base if count == 0 else f"{base}-{count}"
