# courtinvite/utils/slug.py
import re
import unicodedata

DEFAULT_HOST_SLUG = "host"
MAX_SLUG_LENGTH = 60


def to_slug(name: str | None, fallback: str = DEFAULT_HOST_SLUG) -> str:
    """
    Generate a URL-friendly slug from a display name.

    Host slugs are cosmetic: invite pages resolve by public code, so the slug
    does not need to be unique.
    """
    if not name:
        return fallback

    # Transliterate unicode to ASCII (e.g., "Café" -> "Cafe")
    normalized = unicodedata.normalize("NFKD", name)
    ascii_text = normalized.encode("ascii", "ignore").decode("ascii")

    slug = re.sub(r"[^a-z0-9]+", "-", ascii_text.lower())
    slug = slug.strip("-")[:MAX_SLUG_LENGTH].rstrip("-")

    return slug or fallback
