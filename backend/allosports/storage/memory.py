"""
In-process storage backed by dictionaries.

Ephemeral: everything is lost when the process exits. Used for local
development and as the reference for the relational store's behaviour.
"""
import uuid
from dataclasses import replace
from typing import Any, List, Optional

from .base import (
    ArticleRecord,
    ArticleWithAuthor,
    AuthorSummary,
    NewArticle,
    NewUser,
    Storage,
    StorageConflict,
    UserRecord,
    check_article_changes,
    search_key,
    search_text,
    utc_now,
)


class MemoryStorage(Storage):
    def __init__(self):
        self._users: dict[str, UserRecord] = {}
        self._articles: dict[str, ArticleRecord] = {}

    @property
    def name(self) -> str:
        return "memory"

    # ----- users -----
    async def get_user(self, user_id: str) -> Optional[UserRecord]:
        user = self._users.get(user_id)
        return replace(user) if user else None

    async def get_user_by_username(self, username: str) -> Optional[UserRecord]:
        for user in self._users.values():
            if user.username == username:
                return replace(user)
        return None

    async def get_user_by_email(self, email: str) -> Optional[UserRecord]:
        for user in self._users.values():
            if user.email == email:
                return replace(user)
        return None

    async def create_user(self, data: NewUser) -> UserRecord:
        for user in self._users.values():
            if user.username == data.username:
                raise StorageConflict("username already exists")
            if user.email == data.email:
                raise StorageConflict("email already exists")
        user = UserRecord(
            id=str(uuid.uuid4()),
            username=data.username,
            email=data.email,
            password_hash=data.password_hash,
            role=data.role,
            first_name=data.first_name,
            last_name=data.last_name,
            profile_image_url=data.profile_image_url,
            created_at=utc_now(),
        )
        self._users[user.id] = user
        return replace(user)

    async def has_user_with_role(self, role: str) -> bool:
        return any(user.role == role for user in self._users.values())

    # ----- articles -----
    def _attach_author(self, article: ArticleRecord) -> ArticleWithAuthor:
        author = self._users.get(article.author_id)
        return ArticleWithAuthor(
            article=replace(article),
            author=AuthorSummary.from_user(author) if author else None,
        )

    def _newest_first(self, articles) -> List[ArticleWithAuthor]:
        # id breaks ties, as in the relational store
        ordered = sorted(articles, key=lambda a: (a.created_at, a.id), reverse=True)
        return [self._attach_author(a) for a in ordered]

    async def get_article(self, article_id: str) -> Optional[ArticleWithAuthor]:
        article = self._articles.get(article_id)
        if article is None:
            return None
        return self._attach_author(article)

    async def get_article_by_slug(self, slug: str) -> Optional[ArticleRecord]:
        for article in self._articles.values():
            if article.slug == slug:
                return replace(article)
        return None

    async def list_published_articles(self, category: Optional[str] = None) -> List[ArticleWithAuthor]:
        return self._newest_first(
            a for a in self._articles.values()
            if a.published and (category is None or a.category == category)
        )

    async def list_articles_by_author(self, author_id: str) -> List[ArticleWithAuthor]:
        return self._newest_first(a for a in self._articles.values() if a.author_id == author_id)

    async def search_articles(self, query: str) -> List[ArticleWithAuthor]:
        needle = search_key(query)

        def matches(a: ArticleRecord) -> bool:
            return needle in search_text(a.title, a.excerpt, a.content, a.category)

        return self._newest_first(a for a in self._articles.values() if a.published and matches(a))

    def _slug_taken(self, slug: str, exclude_id: Optional[str] = None) -> bool:
        return any(a.slug == slug and a.id != exclude_id for a in self._articles.values())

    async def create_article(self, data: NewArticle) -> ArticleRecord:
        if data.author_id not in self._users:
            raise ValueError(f"author {data.author_id} does not exist")
        if self._slug_taken(data.slug):
            raise StorageConflict("slug already exists")
        now = utc_now()
        article = ArticleRecord(
            id=str(uuid.uuid4()),
            title=data.title,
            slug=data.slug,
            excerpt=data.excerpt,
            content=data.content,
            category=data.category,
            author_id=data.author_id,
            image_url=data.image_url,
            image_credit=data.image_credit,
            views=0,
            published=data.published,
            featured=data.featured,
            created_at=data.created_at or now,
            updated_at=now,
        )
        self._articles[article.id] = article
        return replace(article)

    async def update_article(self, article_id: str, changes: dict[str, Any]) -> Optional[ArticleRecord]:
        check_article_changes(changes)
        article = self._articles.get(article_id)
        if article is None:
            return None
        if "slug" in changes and self._slug_taken(changes["slug"], exclude_id=article_id):
            raise StorageConflict("slug already exists")
        updated = replace(article, **changes, updated_at=utc_now())
        self._articles[article_id] = updated
        return replace(updated)

    async def delete_article(self, article_id: str) -> bool:
        return self._articles.pop(article_id, None) is not None

    async def increment_views(self, article_id: str) -> None:
        article = self._articles.get(article_id)
        if article is not None:
            article.views += 1
