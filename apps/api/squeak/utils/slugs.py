"""Human-readable path segments for question permalinks."""

import re
import unicodedata

_SLUG_CLEANUP = re.compile(r"[^a-z0-9]+")
MAX_SLUG_LENGTH = 80


def slugify(value: str | None, fallback: str = "question") -> str:
    """
    Lowercase ASCII slug: accents stripped, runs of other characters
    collapsed to single hyphens.
    """
    if not value:
        return fallback
    normalized = unicodedata.normalize("NFKD", value)
    ascii_text = normalized.encode("ascii", "ignore").decode("ascii")
    slug = _SLUG_CLEANUP.sub("-", ascii_text.lower()).strip("-")
    slug = slug[:MAX_SLUG_LENGTH].rstrip("-")
    return slug or fallback
