# allosports/schemas/article.py
"""
Pydantic schemas for article endpoints.

Only the fields below are read from request bodies; anything else a client
sends (slug, authorId, views, scheduledAt, ...) is ignored. The slug and the
owning author are always set by the server.
"""
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, field_validator


class Category(str, Enum):
    """Sport leagues an article can be filed under."""
    NHL = "NHL"
    NBA = "NBA"
    NFL = "NFL"
    MLB = "MLB"
    SOCCER = "Soccer"
    ATP = "ATP"
    F1 = "F1"


CATEGORIES = [c.value for c in Category]


def normalize_category(v):
    """Match a category case-insensitively ("nhl" -> Category.NHL)."""
    if isinstance(v, Category) or not isinstance(v, str):
        return v
    key = v.strip().lower()
    for c in Category:
        if c.value.lower() == key:
            return c
    return v  # let enum validation report it


class ArticleCreateIn(BaseModel):
    title: str = Field(min_length=1, max_length=500)
    excerpt: str = Field(min_length=1)
    content: str = Field(min_length=1)
    category: Category
    imageUrl: Optional[str] = None
    imageCredit: Optional[str] = None
    published: bool = False  # Articles start as drafts
    featured: bool = False

    @field_validator("category", mode="before")
    @classmethod
    def category_any_case(cls, v):
        return normalize_category(v)


class ArticleUpdateIn(BaseModel):
    """
    Partial update: only the fields present in the body are changed.
    imageUrl / imageCredit may be set to null to clear them; the other
    fields may not be null.
    """
    title: Optional[str] = Field(default=None, min_length=1, max_length=500)
    excerpt: Optional[str] = Field(default=None, min_length=1)
    content: Optional[str] = Field(default=None, min_length=1)
    category: Optional[Category] = None
    imageUrl: Optional[str] = None
    imageCredit: Optional[str] = None
    published: Optional[bool] = None
    featured: Optional[bool] = None

    @field_validator("category", mode="before")
    @classmethod
    def category_any_case(cls, v):
        return normalize_category(v)

    @field_validator("title", "excerpt", "content", "category", "published", "featured", mode="before")
    @classmethod
    def reject_null(cls, v):
        if v is None:
            raise ValueError("may not be null")
        return v


# request body field -> storage field
ARTICLE_FIELD_MAP = {
    "title": "title",
    "excerpt": "excerpt",
    "content": "content",
    "category": "category",
    "imageUrl": "image_url",
    "imageCredit": "image_credit",
    "published": "published",
    "featured": "featured",
}


def to_storage_fields(data: dict) -> dict:
    """Rename camelCase body keys to storage field names; enum values become plain strings."""
    out = {}
    for key, value in data.items():
        if isinstance(value, Category):
            value = value.value
        out[ARTICLE_FIELD_MAP[key]] = value
    return out
