# allosports/core/slug.py
"""
Title -> slug conversion for article URLs.
"""
import re
import unicodedata

SLUG_MAX_LENGTH = 150
EMPTY_SLUG = "article"

_NON_ALNUM = re.compile(r"[^a-z0-9]+")


def slugify(title: str, max_length: int = SLUG_MAX_LENGTH) -> str:
    """
    Convert a title into a lowercase, accent-free, hyphen-separated slug.

    "Félix Auger-Aliassime à Melbourne!" -> "felix-auger-aliassime-a-melbourne"

    The result never starts or ends with a hyphen and is at most
    `max_length` characters. A title without any letter or digit gives
    EMPTY_SLUG.
    """
    text = unicodedata.normalize("NFD", title.lower())
    text = "".join(ch for ch in text if not unicodedata.combining(ch))
    text = _NON_ALNUM.sub("-", text).strip("-")
    text = text[:max_length].rstrip("-")
    return text or EMPTY_SLUG


def with_suffix(slug: str, n: int, max_length: int = SLUG_MAX_LENGTH) -> str:
    """Return `slug-n`, shortening the base so the whole thing fits max_length."""
    suffix = f"-{n}"
    base = slug[: max_length - len(suffix)].rstrip("-")
    return f"{base}{suffix}"
