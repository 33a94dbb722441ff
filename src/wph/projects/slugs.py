"""URL slug generation and scoped uniqueness resolution."""

from __future__ import annotations

import re
import unicodedata
from collections.abc import Awaitable, Callable

_DISALLOWED = re.compile(r"[^\w\s-]", re.ASCII)
_SEPARATORS = re.compile(r"[\s_-]+")


def slugify(text: str) -> str:
    """Turn an arbitrary title into a lowercase, hyphenated slug.

    Accented letters are folded to ASCII ("Café" -> "cafe"); every other
    non-alphanumeric character is dropped. The result only contains
    ``[a-z0-9-]`` and never starts or ends with a hyphen.
    """
    decomposed = unicodedata.normalize("NFKD", text)
    folded = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    slug = _DISALLOWED.sub("", folded.lower().strip())
    slug = _SEPARATORS.sub("-", slug)
    return slug.strip("-")


async def resolve_unique(
    candidate: str,
    exists: Callable[[str], Awaitable[bool]],
    separator: str = "-",
) -> str:
    """Return ``candidate`` or the first ``candidate{separator}{n}`` not taken.

    ``exists`` is a point lookup bound to the uniqueness scope (one owner's
    projects, or all usernames). Suffixes start at 1.
    """
    if not await exists(candidate):
        return candidate
    n = 1
    while await exists(f"{candidate}{separator}{n}"):
        n += 1
    return f"{candidate}{separator}{n}"
