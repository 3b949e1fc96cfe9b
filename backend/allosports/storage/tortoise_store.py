"""
Relational storage on top of Tortoise ORM.
"""
import logging
import uuid
from typing import Any, List, Optional

from tortoise.exceptions import IntegrityError
from tortoise.expressions import F

from allosports.core.db import close_db, init_db
from allosports.models import Article, User
from .base import (
    ArticleRecord,
    ArticleWithAuthor,
    AuthorSummary,
    NewArticle,
    NewUser,
    Storage,
    StorageConflict,
    UserRecord,
    SEARCH_FIELDS,
    check_article_changes,
    search_key,
    search_text,
    utc_now,
)

logger = logging.getLogger("uvicorn.error")

# Newest first; id breaks ties (string order, same as MemoryStorage)
NEWEST_FIRST = ("-created_at", "-id")


def _user_record(u: User) -> UserRecord:
    return UserRecord(
        id=str(u.id),
        username=u.username,
        email=u.email,
        password_hash=u.password_hash,
        role=u.role,
        first_name=u.first_name,
        last_name=u.last_name,
        profile_image_url=u.profile_image_url,
        created_at=u.created_at,
    )


def _article_record(a: Article) -> ArticleRecord:
    return ArticleRecord(
        id=str(a.id),
        title=a.title,
        slug=a.slug,
        excerpt=a.excerpt,
        content=a.content,
        category=a.category,
        author_id=str(a.author_id),
        image_url=a.image_url,
        image_credit=a.image_credit,
        views=a.views,
        published=a.published,
        featured=a.featured,
        created_at=a.created_at,
        updated_at=a.updated_at,
    )


def _with_author(a: Article) -> ArticleWithAuthor:
    # expects `author` to have been fetched with select_related
    author = a.author
    return ArticleWithAuthor(
        article=_article_record(a),
        author=AuthorSummary(
            id=str(author.id),
            first_name=author.first_name,
            last_name=author.last_name,
            profile_image_url=author.profile_image_url,
        ) if author else None,
    )


def _is_uuid_like(value: str) -> bool:
    try:
        uuid.UUID(str(value))
    except ValueError:
        return False
    return True


class TortoiseStorage(Storage):
    def __init__(self, db_url: str, generate_schemas: bool = False):
        self.db_url = db_url
        self.generate_schemas = generate_schemas

    @property
    def name(self) -> str:
        return "database"

    async def open(self) -> None:
        await init_db(self.db_url, generate_schemas=self.generate_schemas)
        # scheme only; the URL may carry credentials
        logger.info("[storage] database connected (%s)", self.db_url.split(":", 1)[0])

    async def close(self) -> None:
        await close_db()

    # ----- users -----
    async def get_user(self, user_id: str) -> Optional[UserRecord]:
        if not _is_uuid_like(user_id):
            return None
        u = await User.get_or_none(id=user_id)
        return _user_record(u) if u else None

    async def get_user_by_username(self, username: str) -> Optional[UserRecord]:
        u = await User.get_or_none(username=username)
        return _user_record(u) if u else None

    async def get_user_by_email(self, email: str) -> Optional[UserRecord]:
        u = await User.get_or_none(email=email)
        return _user_record(u) if u else None

    async def create_user(self, data: NewUser) -> UserRecord:
        try:
            u = await User.create(
                username=data.username,
                email=data.email,
                password_hash=data.password_hash,
                role=data.role,
                first_name=data.first_name,
                last_name=data.last_name,
                profile_image_url=data.profile_image_url,
            )
        except IntegrityError as exc:
            raise StorageConflict(str(exc)) from exc
        return _user_record(u)

    async def has_user_with_role(self, role: str) -> bool:
        return await User.filter(role=role).exists()

    # ----- articles -----
    async def get_article(self, article_id: str) -> Optional[ArticleWithAuthor]:
        if not _is_uuid_like(article_id):
            return None
        a = await Article.filter(id=article_id).select_related("author").first()
        return _with_author(a) if a else None

    async def get_article_by_slug(self, slug: str) -> Optional[ArticleRecord]:
        a = await Article.get_or_none(slug=slug)
        return _article_record(a) if a else None

    async def list_published_articles(self, category: Optional[str] = None) -> List[ArticleWithAuthor]:
        qs = Article.filter(published=True)
        if category is not None:
            qs = qs.filter(category=category)
        rows = await qs.select_related("author").order_by(*NEWEST_FIRST)
        return [_with_author(a) for a in rows]

    async def list_articles_by_author(self, author_id: str) -> List[ArticleWithAuthor]:
        if not _is_uuid_like(author_id):
            return []
        rows = await Article.filter(author_id=author_id).select_related("author").order_by(*NEWEST_FIRST)
        return [_with_author(a) for a in rows]

    async def search_articles(self, query: str) -> List[ArticleWithAuthor]:
        rows = await (
            Article.filter(published=True, search_text__contains=search_key(query))
            .select_related("author")
            .order_by(*NEWEST_FIRST)
        )
        return [_with_author(a) for a in rows]

    async def create_article(self, data: NewArticle) -> ArticleRecord:
        if not _is_uuid_like(data.author_id) or not await User.filter(id=data.author_id).exists():
            raise ValueError(f"author {data.author_id} does not exist")
        values = dict(
            title=data.title,
            slug=data.slug,
            excerpt=data.excerpt,
            content=data.content,
            category=data.category,
            author_id=data.author_id,
            image_url=data.image_url,
            image_credit=data.image_credit,
            published=data.published,
            featured=data.featured,
            search_text=search_text(data.title, data.excerpt, data.content, data.category),
        )
        if data.created_at is not None:
            values["created_at"] = data.created_at
        try:
            a = await Article.create(**values)
        except IntegrityError as exc:
            raise StorageConflict(str(exc)) from exc
        return _article_record(a)

    async def update_article(self, article_id: str, changes: dict[str, Any]) -> Optional[ArticleRecord]:
        check_article_changes(changes)
        if not _is_uuid_like(article_id):
            return None
        a = await Article.get_or_none(id=article_id)
        if a is None:
            return None

        # Only the changed columns are written; views is left to increment_views
        values = dict(changes)
        if any(f in changes for f in SEARCH_FIELDS):
            values["search_text"] = search_text(**{f: changes.get(f, getattr(a, f)) for f in SEARCH_FIELDS})
        values["updated_at"] = utc_now()
        try:
            await Article.filter(id=article_id).update(**values)
        except IntegrityError as exc:
            raise StorageConflict(str(exc)) from exc

        a = await Article.get_or_none(id=article_id)
        return _article_record(a) if a else None

    async def delete_article(self, article_id: str) -> bool:
        if not _is_uuid_like(article_id):
            return False
        deleted = await Article.filter(id=article_id).delete()
        return deleted > 0

    async def increment_views(self, article_id: str) -> None:
        if not _is_uuid_like(article_id):
            return
        await Article.filter(id=article_id).update(views=F("views") + 1)
