"""
Article helpers shared by the routes and the bootstrap code.
"""
from typing import Optional

from allosports.core.slug import slugify, with_suffix
from allosports.storage import Storage

# Give up on numbered suffixes after this many collisions
MAX_SLUG_ATTEMPTS = 1000


async def unique_slug(storage: Storage, title: str, exclude_id: Optional[str] = None) -> str:
    """
    Slug for `title` that no other article uses.

    The plain slug is used when it is free (or already belongs to
    `exclude_id`, the article being updated); otherwise "-2", "-3", ...
    is appended.
    """
    base = slugify(title)
    candidate = base
    for n in range(2, MAX_SLUG_ATTEMPTS + 2):
        owner = await storage.get_article_by_slug(candidate)
        if owner is None or owner.id == exclude_id:
            return candidate
        candidate = with_suffix(base, n)
    raise RuntimeError(f"could not find a free slug for {base!r}")
