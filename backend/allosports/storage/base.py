"""
Storage Abstract Interface

Provides a unified interface over the two interchangeable stores
(in-process memory / relational database via Tortoise ORM).
"""
import datetime as dt
from abc import ABC, abstractmethod
from dataclasses import dataclass, field, asdict
from typing import Any, List, Optional

ROLE_USER = "USER"
ROLE_AUTHOR = "AUTHOR"
ROLE_ADMIN = "ADMIN"
ROLES = (ROLE_USER, ROLE_AUTHOR, ROLE_ADMIN)

# Fields of an article that callers may change after creation
MUTABLE_ARTICLE_FIELDS = (
    "title",
    "slug",
    "excerpt",
    "content",
    "category",
    "image_url",
    "image_credit",
    "published",
    "featured",
)


class StorageConflict(Exception):
    """A write would break a uniqueness rule (username, email or slug)."""


def utc_now() -> dt.datetime:
    return dt.datetime.now(dt.timezone.utc)


@dataclass
class UserRecord:
    id: str
    username: str
    email: str
    password_hash: str
    role: str = ROLE_AUTHOR
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    profile_image_url: Optional[str] = None
    created_at: Optional[dt.datetime] = None

    def public(self) -> dict[str, Any]:
        """User fields safe to hand out (no password hash)."""
        data = asdict(self)
        data.pop("password_hash")
        return data


@dataclass
class AuthorSummary:
    """Reduced author view joined into article reads (no email, no password)."""
    id: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    profile_image_url: Optional[str] = None

    @classmethod
    def from_user(cls, user: UserRecord) -> "AuthorSummary":
        return cls(
            id=user.id,
            first_name=user.first_name,
            last_name=user.last_name,
            profile_image_url=user.profile_image_url,
        )


@dataclass
class ArticleRecord:
    id: str
    title: str
    slug: str
    excerpt: str
    content: str
    category: str
    author_id: str
    image_url: Optional[str] = None
    image_credit: Optional[str] = None
    views: int = 0
    published: bool = False
    featured: bool = False
    created_at: Optional[dt.datetime] = None
    updated_at: Optional[dt.datetime] = None


@dataclass
class ArticleWithAuthor:
    """Read-time projection: an article plus its author's summary."""
    article: ArticleRecord
    author: Optional[AuthorSummary] = None


@dataclass
class NewUser:
    username: str
    email: str
    password_hash: str
    role: str = ROLE_AUTHOR
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    profile_image_url: Optional[str] = None


@dataclass
class NewArticle:
    title: str
    slug: str
    excerpt: str
    content: str
    category: str
    author_id: str
    image_url: Optional[str] = None
    image_credit: Optional[str] = None
    published: bool = False
    featured: bool = False
    created_at: Optional[dt.datetime] = field(default=None)


class Storage(ABC):
    """Storage Abstract Base Class"""

    async def open(self) -> None:
        """Acquire connections / create tables. No-op by default."""

    async def close(self) -> None:
        """Release connections. No-op by default."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Backend name (e.g., "memory")"""

    # ----- users -----
    @abstractmethod
    async def get_user(self, user_id: str) -> Optional[UserRecord]:
        ...

    @abstractmethod
    async def get_user_by_username(self, username: str) -> Optional[UserRecord]:
        ...

    @abstractmethod
    async def get_user_by_email(self, email: str) -> Optional[UserRecord]:
        ...

    @abstractmethod
    async def create_user(self, data: NewUser) -> UserRecord:
        """Insert a user. Raises StorageConflict on a duplicate username or email."""

    @abstractmethod
    async def has_user_with_role(self, role: str) -> bool:
        ...

    # ----- articles -----
    @abstractmethod
    async def get_article(self, article_id: str) -> Optional[ArticleWithAuthor]:
        """Article by id, whatever its published state."""

    @abstractmethod
    async def get_article_by_slug(self, slug: str) -> Optional[ArticleRecord]:
        ...

    @abstractmethod
    async def list_published_articles(self, category: Optional[str] = None) -> List[ArticleWithAuthor]:
        """
        Published articles, newest first, optionally narrowed to one category.
        Equal created_at values are ordered by id, descending.
        """

    @abstractmethod
    async def list_articles_by_author(self, author_id: str) -> List[ArticleWithAuthor]:
        """All articles owned by author_id (drafts included), newest first."""

    @abstractmethod
    async def search_articles(self, query: str) -> List[ArticleWithAuthor]:
        """
        Published articles whose title, excerpt, content or category contains
        `query` (case-insensitive), newest first.
        """

    @abstractmethod
    async def create_article(self, data: NewArticle) -> ArticleRecord:
        """
        Insert an article.

        Raises:
            StorageConflict: duplicate slug
            ValueError: author_id is not an existing user
        """

    @abstractmethod
    async def update_article(self, article_id: str, changes: dict[str, Any]) -> Optional[ArticleRecord]:
        """
        Apply a partial update (keys from MUTABLE_ARTICLE_FIELDS) and refresh
        updated_at. Returns None when the article does not exist.
        """

    @abstractmethod
    async def delete_article(self, article_id: str) -> bool:
        ...

    @abstractmethod
    async def increment_views(self, article_id: str) -> None:
        """Atomically add one to the article's view counter."""


def check_article_changes(changes: dict[str, Any]) -> None:
    unknown = set(changes) - set(MUTABLE_ARTICLE_FIELDS)
    if unknown:
        raise ValueError(f"Unknown article fields: {sorted(unknown)}")


# Text fields covered by search_articles
SEARCH_FIELDS = ("title", "excerpt", "content", "category")


def search_key(text: str) -> str:
    """Case folding applied to both the query and the searched text."""
    return text.lower()


def search_text(title: str, excerpt: str, content: str, category: str) -> str:
    """
    Folded, newline-joined copy of an article's searchable fields.

    Both stores match a folded query as a substring of this value, so
    non-ASCII case handling does not depend on the database's LIKE.
    """
    return "\n".join(search_key(v) for v in (title, excerpt, content, category))
