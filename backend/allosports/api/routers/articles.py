# allosports/api/routers/articles.py
import logging

from fastapi import APIRouter, Depends, Query, Request, Response, status

from allosports.api.deps import ensure_can_modify, get_storage, require_author
from allosports.core.errors import api_error, not_found, validation_error
from allosports.core.security import TokenIdentity
from allosports.schemas.article import (
    CATEGORIES,
    ArticleCreateIn,
    ArticleUpdateIn,
    normalize_category,
    to_storage_fields,
    Category,
)
from allosports.services import article_page_url, share_links, unique_slug
from allosports.storage import ArticleRecord, ArticleWithAuthor, NewArticle, Storage

logger = logging.getLogger("uvicorn.error")

router = APIRouter(prefix="/articles", tags=["articles"])

# Shorter search terms return nothing rather than everything
MIN_SEARCH_LENGTH = 2


# ===== Serialization =====
def article_to_dict(a: ArticleRecord) -> dict:
    return {
        "id": a.id,
        "title": a.title,
        "slug": a.slug,
        "excerpt": a.excerpt,
        "content": a.content,
        "category": a.category,
        "imageUrl": a.image_url,
        "imageCredit": a.image_credit,
        "authorId": a.author_id,
        "views": a.views,
        "published": a.published,
        "featured": a.featured,
        "createdAt": a.created_at.isoformat() if a.created_at else None,
        "updatedAt": a.updated_at.isoformat() if a.updated_at else None,
    }


def article_with_author_to_dict(item: ArticleWithAuthor) -> dict:
    data = article_to_dict(item.article)
    author = item.author
    data["author"] = {
        "id": author.id,
        "firstName": author.first_name,
        "lastName": author.last_name,
        "profileImageUrl": author.profile_image_url,
    } if author else None
    return data


async def _load_article(storage: Storage, article_id: str) -> ArticleWithAuthor:
    item = await storage.get_article(article_id)
    if not item:
        raise not_found()
    return item


async def _load_published(storage: Storage, article_id: str) -> ArticleWithAuthor:
    item = await storage.get_article(article_id)
    if not item or not item.article.published:
        raise not_found()
    return item


# ===== Public routes =====
@router.get("")
async def list_articles(
    category: str | None = Query(default=None, description="Only articles of this league, e.g. NHL"),
    storage: Storage = Depends(get_storage),
):
    """
    Published articles, newest first, each with its author summary.
    Drafts are never listed here.
    """
    league = None
    if category:
        league = normalize_category(category)
        if not isinstance(league, Category):
            raise validation_error("category", f"Unknown category; expected one of {', '.join(CATEGORIES)}")
        league = league.value
    items = await storage.list_published_articles(category=league)
    return [article_with_author_to_dict(a) for a in items]


@router.get("/search")
async def search_articles(
    q: str | None = Query(default=None),
    storage: Storage = Depends(get_storage),
):
    """
    Case-insensitive search of published articles over title, excerpt,
    content and category. Queries under two characters return [].
    """
    query = (q or "").strip()
    if len(query) < MIN_SEARCH_LENGTH:
        return []
    items = await storage.search_articles(query)
    return [article_with_author_to_dict(a) for a in items]


@router.get("/my")
async def my_articles(
    current: TokenIdentity = Depends(require_author),
    storage: Storage = Depends(get_storage),
):
    """
    The caller's own articles, drafts included, newest first.

    Raises:
        HTTPException (401): If user is not authenticated
        HTTPException (403): If the caller is not an author or administrator
    """
    items = await storage.list_articles_by_author(current.id)
    return [article_with_author_to_dict(a) for a in items]


@router.get("/{article_id}")
async def get_article(article_id: str, storage: Storage = Depends(get_storage)):
    """
    One article by id, whatever its published state (authors preview drafts
    through this route).

    Reading a published article counts one view; drafts are not counted.
    """
    item = await _load_article(storage, article_id)
    if item.article.published:
        await storage.increment_views(article_id)
        item = await _load_article(storage, article_id)
    return article_with_author_to_dict(item)


@router.get("/{article_id}/related")
async def related_articles(
    article_id: str,
    limit: int = Query(3, ge=1, le=20),
    storage: Storage = Depends(get_storage),
):
    """Other published articles of the same league, newest first."""
    item = await _load_published(storage, article_id)
    same_league = await storage.list_published_articles(category=item.article.category)
    related = [a for a in same_league if a.article.id != article_id][:limit]
    return [article_with_author_to_dict(a) for a in related]


@router.get("/{article_id}/share")
async def article_share_links(
    article_id: str,
    request: Request,
    storage: Storage = Depends(get_storage),
):
    """Share-intent URLs (Facebook, X) for a published article."""
    item = await _load_published(storage, article_id)
    page_url = article_page_url(str(request.base_url), item.article.id)
    return share_links(page_url, item.article.title)


# ===== Author routes =====
@router.post("", status_code=status.HTTP_201_CREATED)
async def create_article(
    body: ArticleCreateIn,
    current: TokenIdentity = Depends(require_author),
    storage: Storage = Depends(get_storage),
):
    """
    Create an article owned by the caller.

    The slug is computed from the title and the author is the caller; any
    slug or authorId in the body is ignored.

    Raises:
        HTTPException (400): If the body does not match the article schema
        HTTPException (401): If the caller is not authenticated or no longer exists
        HTTPException (403): If the caller is not an author or administrator
    """
    if not await storage.get_user(current.id):
        raise api_error(status.HTTP_401_UNAUTHORIZED, "AUTH_USER_NOT_FOUND", "User not found")

    fields = to_storage_fields(body.model_dump())
    fields["slug"] = await unique_slug(storage, body.title)
    article = await storage.create_article(NewArticle(author_id=current.id, **fields))
    logger.info("[articles] created id=%s slug=%s by=%s", article.id, article.slug, current.username)
    return article_to_dict(article)


@router.patch("/{article_id}")
async def update_article(
    article_id: str,
    body: ArticleUpdateIn,
    current: TokenIdentity = Depends(require_author),
    storage: Storage = Depends(get_storage),
):
    """
    Partially update an article. Only its author or an administrator may.

    Only the fields present in the body change; a new title also produces a
    new slug. updatedAt is refreshed on every call. Publishing and
    unpublishing go through this route ({"published": true|false}).

    Raises:
        HTTPException (403): If the caller is neither the author nor an administrator
        HTTPException (404): If the article does not exist
    """
    existing = await _load_article(storage, article_id)
    ensure_can_modify(existing.article, current)

    changes = to_storage_fields(body.model_dump(exclude_unset=True))
    if "title" in changes:
        changes["slug"] = await unique_slug(storage, changes["title"], exclude_id=article_id)

    updated = await storage.update_article(article_id, changes)
    if not updated:
        raise not_found()
    logger.info("[articles] updated id=%s fields=%s by=%s", article_id, sorted(changes), current.username)
    return article_to_dict(updated)


@router.delete("/{article_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_article(
    article_id: str,
    current: TokenIdentity = Depends(require_author),
    storage: Storage = Depends(get_storage),
):
    """
    Permanently delete an article. Only its author or an administrator may.
    """
    existing = await _load_article(storage, article_id)
    ensure_can_modify(existing.article, current)

    await storage.delete_article(article_id)
    logger.info("[articles] deleted id=%s by=%s", article_id, current.username)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
