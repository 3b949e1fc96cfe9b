import os
import uuid

# Settings are read from the environment at import time
os.environ["ENV"] = "test"
os.environ["STORAGE_BACKEND"] = "memory"
os.environ.pop("ADMIN_PASSWORD", None)
os.environ.pop("SEED_DEMO_CONTENT", None)

import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from allosports.core.security import TOKEN_COOKIE_NAME, hash_password
from allosports.main import create_app
from allosports.storage import (
    ROLE_ADMIN,
    ROLE_AUTHOR,
    ROLE_USER,
    MemoryStorage,
    NewUser,
    TortoiseStorage,
)

TEST_DB_URL = "sqlite://:memory:"


@pytest_asyncio.fixture(params=["memory", "tortoise"])
async def storage(request):
    """
    A fresh, empty store. Every test using it runs once per implementation
    so both stores are held to the same behaviour.
    """
    if request.param == "memory":
        store = MemoryStorage()
    else:
        store = TortoiseStorage(TEST_DB_URL, generate_schemas=True)
    await store.open()
    yield store
    await store.close()


@pytest_asyncio.fixture
async def app(storage):
    return create_app(storage=storage)


@pytest_asyncio.fixture
async def client(app):
    """
    Provide an HTTPX AsyncClient bound to the FastAPI app.
    The store is opened by the `storage` fixture, so lifespan events are not needed.
    """
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://testserver") as async_client:
        yield async_client


@pytest_asyncio.fixture
async def create_user(storage):
    """
    Factory fixture to create users directly in the store.
    """

    async def _create_user(role: str = ROLE_AUTHOR, password: str = "UserPass!23", **extra):
        username = extra.pop("username", f"{role.lower()}_{uuid.uuid4().hex[:6]}")
        user = await storage.create_user(NewUser(
            username=username,
            email=extra.pop("email", f"{username}@example.com"),
            password_hash=hash_password(password),
            role=role,
            **extra,
        ))
        return user, password

    return _create_user


@pytest_asyncio.fixture
async def login(client):
    """
    Log in through the API and return headers carrying the auth cookie.

    The client's own cookie jar is cleared afterwards so that several
    identities can be used side by side in one test.
    """

    async def _login(username: str, password: str) -> dict[str, str]:
        resp = await client.post("/api/auth/login", json={"username": username, "password": password})
        assert resp.status_code == 200, resp.text
        token = resp.cookies.get(TOKEN_COOKIE_NAME)
        assert token
        client.cookies.clear()
        return {"Cookie": f"{TOKEN_COOKIE_NAME}={token}"}

    return _login


@pytest_asyncio.fixture
async def author(create_user, login):
    user, password = await create_user(ROLE_AUTHOR)
    return user, await login(user.username, password)


@pytest_asyncio.fixture
async def other_author(create_user, login):
    user, password = await create_user(ROLE_AUTHOR)
    return user, await login(user.username, password)


@pytest_asyncio.fixture
async def admin(create_user, login):
    user, password = await create_user(ROLE_ADMIN)
    return user, await login(user.username, password)


@pytest_asyncio.fixture
async def reader(create_user, login):
    user, password = await create_user(ROLE_USER)
    return user, await login(user.username, password)


@pytest_asyncio.fixture
async def create_article(client):
    """
    Create an article through the API as the owner of `headers`.
    """

    async def _create_article(headers: dict[str, str], **overrides) -> dict:
        payload = {
            "title": "Canadiens Win Big Game!",
            "excerpt": "Montreal takes it in overtime.",
            "content": "A long night at the Bell Centre ended with a goal in overtime.",
            "category": "NHL",
        }
        payload.update(overrides)
        resp = await client.post("/api/articles", json=payload, headers=headers)
        assert resp.status_code == 201, resp.text
        return resp.json()

    return _create_article
