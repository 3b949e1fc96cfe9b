import asyncio

import pytest
from httpx import ASGITransport, AsyncClient

from allosports.config import Settings
from allosports.core.security import TOKEN_COOKIE_NAME, create_access_token
from allosports.main import create_app
from allosports.storage import MemoryStorage


pytestmark = pytest.mark.asyncio


# ============================================================================
# Public reads
# ============================================================================

async def test_public_listing_hides_drafts(client, author, create_article):
    _, headers = author
    draft = await create_article(headers, title="Draft story")
    live = await create_article(headers, title="Live story", published=True)

    resp = await client.get("/api/articles")
    assert resp.status_code == 200
    ids = [a["id"] for a in resp.json()]
    assert live["id"] in ids
    assert draft["id"] not in ids


async def test_listing_includes_author_projection(client, create_user, login, create_article):
    user, password = await create_user(first_name="Marc", last_name="Tremblay", profile_image_url="https://img/m.png")
    headers = await login(user.username, password)
    await create_article(headers, published=True)

    item = (await client.get("/api/articles")).json()[0]
    assert item["authorId"] == user.id
    assert item["author"] == {
        "id": user.id,
        "firstName": "Marc",
        "lastName": "Tremblay",
        "profileImageUrl": "https://img/m.png",
    }


async def test_listing_is_newest_first(client, author, create_article):
    _, headers = author
    first = await create_article(headers, title="First", published=True)
    await asyncio.sleep(0.01)
    second = await create_article(headers, title="Second", published=True)

    ids = [a["id"] for a in (await client.get("/api/articles")).json()]
    assert ids == [second["id"], first["id"]]


async def test_listing_by_category(client, author, create_article):
    _, headers = author
    nhl = await create_article(headers, title="Hockey night", category="NHL", published=True)
    await create_article(headers, title="Hoops", category="NBA", published=True)

    resp = await client.get("/api/articles", params={"category": "nhl"})
    assert resp.status_code == 200
    assert [a["id"] for a in resp.json()] == [nhl["id"]]

    bad = await client.get("/api/articles", params={"category": "curling"})
    assert bad.status_code == 400
    detail = bad.json()["detail"]
    assert detail["code"] == "VALIDATION_ERROR"
    assert [e["field"] for e in detail["errors"]] == ["category"]
    assert "NHL" in detail["errors"][0]["message"]


@pytest.mark.parametrize("q", [None, "", "c", " c "])
async def test_short_search_returns_empty_list(client, author, create_article, q):
    _, headers = author
    await create_article(headers, title="Canadiens", published=True)

    params = {"q": q} if q is not None else {}
    resp = await client.get("/api/articles/search", params=params)
    assert resp.status_code == 200
    assert resp.json() == []


async def test_search_covers_text_fields_and_skips_drafts(client, author, create_article):
    _, headers = author
    by_title = await create_article(headers, title="Raptors stun Celtics", category="NBA", published=True)
    by_content = await create_article(
        headers, title="Weekend recap", content="The raptors bench was the story.", published=True,
    )
    await create_article(headers, title="Raptors draft notes", category="NBA")

    resp = await client.get("/api/articles/search", params={"q": "RAPTORS"})
    assert resp.status_code == 200
    assert {a["id"] for a in resp.json()} == {by_title["id"], by_content["id"]}
    assert all(a["author"] is not None for a in resp.json())


async def test_get_article_by_id_ignores_published_state(client, author, create_article):
    _, headers = author
    draft = await create_article(headers, title="Preview me")

    resp = await client.get(f"/api/articles/{draft['id']}")
    assert resp.status_code == 200
    assert resp.json()["published"] is False
    assert resp.json()["views"] == 0


@pytest.mark.parametrize("article_id", ["00000000-0000-0000-0000-000000000000", "nope"])
async def test_get_missing_article_is_404(client, article_id):
    resp = await client.get(f"/api/articles/{article_id}")
    assert resp.status_code == 404
    assert resp.json()["detail"]["code"] == "ARTICLE_NOT_FOUND"


async def test_reading_published_article_counts_views(client, author, create_article):
    _, headers = author
    live = await create_article(headers, title="Count me", published=True)
    draft = await create_article(headers, title="Do not count me")

    first = await client.get(f"/api/articles/{live['id']}")
    second = await client.get(f"/api/articles/{live['id']}")
    assert first.json()["views"] == 1
    assert second.json()["views"] == 2

    await client.get(f"/api/articles/{draft['id']}")
    assert (await client.get(f"/api/articles/{draft['id']}")).json()["views"] == 0


async def test_related_articles(client, author, create_article):
    _, headers = author
    main = await create_article(headers, title="Game one", category="NHL", published=True)
    sibling = await create_article(headers, title="Game two", category="NHL", published=True)
    await create_article(headers, title="Other league", category="NBA", published=True)
    await create_article(headers, title="Hidden", category="NHL")

    resp = await client.get(f"/api/articles/{main['id']}/related")
    assert resp.status_code == 200
    assert [a["id"] for a in resp.json()] == [sibling["id"]]


async def test_share_links(client, author, create_article):
    _, headers = author
    live = await create_article(headers, title="Share me", published=True)
    draft = await create_article(headers, title="Secret")

    resp = await client.get(f"/api/articles/{live['id']}/share")
    assert resp.status_code == 200
    links = resp.json()
    assert links["url"] == f"http://testserver/article/{live['id']}"
    assert links["facebook"].startswith("https://www.facebook.com/sharer/sharer.php?u=http%3A%2F%2Ftestserver")
    assert links["x"].startswith("https://twitter.com/intent/tweet?url=")
    assert "text=Share+me" in links["x"]

    assert (await client.get(f"/api/articles/{draft['id']}/share")).status_code == 404


async def test_categories(client):
    resp = await client.get("/api/categories")
    assert resp.status_code == 200
    assert resp.json() == ["NHL", "NBA", "NFL", "MLB", "Soccer", "ATP", "F1"]


# ============================================================================
# Access control
# ============================================================================

async def test_create_requires_authentication(client):
    resp = await client.post("/api/articles", json={"title": "x"})
    assert resp.status_code == 401
    assert resp.json()["detail"]["code"] == "AUTH_REQUIRED"


async def test_create_rejects_expired_token(client, author):
    user, _ = author
    expired_config = Settings(env="test", access_token_expire_minutes=-1)
    token = create_access_token(user.id, user.username, user.role, expired_config)
    resp = await client.post(
        "/api/articles",
        json={"title": "x"},
        headers={"Cookie": f"{TOKEN_COOKIE_NAME}={token}"},
    )
    assert resp.status_code == 401
    assert resp.json()["detail"]["code"] == "AUTH_INVALID_TOKEN"


async def test_reader_role_is_forbidden(client, reader):
    _, headers = reader
    resp = await client.post(
        "/api/articles",
        json={"title": "T", "excerpt": "E", "content": "C", "category": "NHL"},
        headers=headers,
    )
    assert resp.status_code == 403
    assert resp.json()["detail"]["code"] == "FORBIDDEN"

    my = await client.get("/api/articles/my", headers=headers)
    assert my.status_code == 403


async def test_my_articles_requires_authentication(client):
    assert (await client.get("/api/articles/my")).status_code == 401


async def test_non_owner_cannot_update_or_delete(client, author, other_author, create_article):
    _, owner_headers = author
    _, intruder_headers = other_author
    article = await create_article(owner_headers)

    patch = await client.patch(f"/api/articles/{article['id']}", json={"title": "Hijacked"}, headers=intruder_headers)
    assert patch.status_code == 403
    assert patch.json()["detail"]["code"] == "FORBIDDEN_NOT_OWNER"

    delete = await client.delete(f"/api/articles/{article['id']}", headers=intruder_headers)
    assert delete.status_code == 403

    unchanged = (await client.get(f"/api/articles/{article['id']}")).json()
    assert unchanged["title"] == article["title"]


async def test_admin_can_update_and_delete_any_article(client, author, admin, create_article):
    _, owner_headers = author
    _, admin_headers = admin
    article = await create_article(owner_headers)

    patch = await client.patch(f"/api/articles/{article['id']}", json={"featured": True}, headers=admin_headers)
    assert patch.status_code == 200
    assert patch.json()["featured"] is True
    assert patch.json()["authorId"] == article["authorId"]

    delete = await client.delete(f"/api/articles/{article['id']}", headers=admin_headers)
    assert delete.status_code == 204
    assert delete.content == b""


async def test_update_and_delete_missing_article_is_404(client, author):
    _, headers = author
    missing = "00000000-0000-0000-0000-000000000000"
    assert (await client.patch(f"/api/articles/{missing}", json={"featured": True}, headers=headers)).status_code == 404
    assert (await client.delete(f"/api/articles/{missing}", headers=headers)).status_code == 404


# ============================================================================
# Create / update semantics
# ============================================================================

async def test_create_sets_slug_author_and_defaults(client, author, other_author):
    user, headers = author
    intruder, _ = other_author
    resp = await client.post(
        "/api/articles",
        json={
            "title": "Félix Auger-Aliassime en quarts!",
            "excerpt": "E",
            "content": "C",
            "category": "atp",
            "slug": "client-chosen",
            "authorId": intruder.id,
            "views": 999,
            "scheduledAt": "2030-01-01T00:00:00Z",
        },
        headers=headers,
    )
    assert resp.status_code == 201
    body = resp.json()
    assert body["slug"] == "felix-auger-aliassime-en-quarts"
    assert body["authorId"] == user.id
    assert body["category"] == "ATP"
    assert body["views"] == 0
    assert body["published"] is False
    assert body["featured"] is False
    assert body["id"] and body["createdAt"] and body["updatedAt"]
    assert "scheduledAt" not in body


@pytest.mark.parametrize(
    "payload, field",
    [
        ({"excerpt": "E", "content": "C", "category": "NHL"}, "title"),
        ({"title": "", "excerpt": "E", "content": "C", "category": "NHL"}, "title"),
        ({"title": "T", "excerpt": "E", "content": "C", "category": "Curling"}, "category"),
        ({"title": "T", "content": "C", "category": "NHL"}, "excerpt"),
    ],
)
async def test_create_validation(client, author, payload, field):
    _, headers = author
    resp = await client.post("/api/articles", json=payload, headers=headers)
    assert resp.status_code == 400
    detail = resp.json()["detail"]
    assert detail["code"] == "VALIDATION_ERROR"
    assert field in [e["field"] for e in detail["errors"]]


async def test_same_title_gets_distinct_slugs(client, author, create_article):
    _, headers = author
    first = await create_article(headers, title="Game Day")
    second = await create_article(headers, title="Game Day")
    third = await create_article(headers, title="Game Day")
    assert first["slug"] == "game-day"
    assert second["slug"] == "game-day-2"
    assert third["slug"] == "game-day-3"


async def test_partial_update(client, author, create_article):
    _, headers = author
    article = await create_article(headers, imageUrl="https://img/1.png", imageCredit="AP")
    await asyncio.sleep(0.01)

    resp = await client.patch(f"/api/articles/{article['id']}", json={"published": True}, headers=headers)
    assert resp.status_code == 200
    body = resp.json()
    assert body["published"] is True
    assert body["title"] == article["title"]
    assert body["slug"] == article["slug"]
    assert body["imageUrl"] == "https://img/1.png"
    assert body["updatedAt"] != article["updatedAt"]

    cleared = await client.patch(f"/api/articles/{article['id']}", json={"imageUrl": None}, headers=headers)
    assert cleared.json()["imageUrl"] is None
    assert cleared.json()["imageCredit"] == "AP"


async def test_title_change_recomputes_slug(client, author, create_article):
    _, headers = author
    article = await create_article(headers, title="Old headline")

    resp = await client.patch(f"/api/articles/{article['id']}", json={"title": "Brand New Headline"}, headers=headers)
    assert resp.json()["slug"] == "brand-new-headline"

    same = await client.patch(f"/api/articles/{article['id']}", json={"title": "Brand New Headline"}, headers=headers)
    assert same.json()["slug"] == "brand-new-headline"


async def test_empty_update_only_touches_updated_at(client, author, create_article):
    _, headers = author
    article = await create_article(headers)
    await asyncio.sleep(0.01)

    resp = await client.patch(f"/api/articles/{article['id']}", json={}, headers=headers)
    assert resp.status_code == 200
    body = resp.json()
    assert body["slug"] == article["slug"]
    assert body["updatedAt"] != article["updatedAt"]


@pytest.mark.parametrize("field", ["title", "published", "category"])
async def test_update_rejects_null_for_required_fields(client, author, create_article, field):
    _, headers = author
    article = await create_article(headers)
    resp = await client.patch(f"/api/articles/{article['id']}", json={field: None}, headers=headers)
    assert resp.status_code == 400
    assert resp.json()["detail"]["code"] == "VALIDATION_ERROR"


async def test_update_ignores_author_reassignment(client, author, other_author, create_article):
    user, headers = author
    intruder, _ = other_author
    article = await create_article(headers)

    resp = await client.patch(f"/api/articles/{article['id']}", json={"authorId": intruder.id}, headers=headers)
    assert resp.status_code == 200
    assert resp.json()["authorId"] == user.id


# ============================================================================
# Service endpoints and error handling
# ============================================================================

async def test_healthz(client):
    resp = await client.get("/healthz")
    assert resp.status_code == 200
    assert resp.json() == {"ok": True}


class BrokenStorage(MemoryStorage):
    async def list_published_articles(self, category=None):
        raise RuntimeError("database went away")


@pytest.mark.parametrize(
    "env, message",
    [("development", "database went away"), ("production", "Internal server error")],
)
async def test_unexpected_errors_become_500(env, message):
    app = create_app(Settings(env=env, jwt_secret="s3cret"), storage=BrokenStorage())
    transport = ASGITransport(app=app, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://testserver") as broken_client:
        resp = await broken_client.get("/api/articles")

    assert resp.status_code == 500
    assert resp.json() == {"detail": {"code": "INTERNAL_ERROR", "message": message}}
