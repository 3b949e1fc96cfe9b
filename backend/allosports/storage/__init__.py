"""
Storage Module

Two interchangeable stores behind one interface:
- MemoryStorage: in-process dictionaries
- TortoiseStorage: relational database via Tortoise ORM
"""
from .base import (
    ROLE_ADMIN,
    ROLE_AUTHOR,
    ROLE_USER,
    ROLES,
    ArticleRecord,
    ArticleWithAuthor,
    AuthorSummary,
    NewArticle,
    NewUser,
    Storage,
    StorageConflict,
    UserRecord,
)
from .factory import build_storage
from .memory import MemoryStorage
from .tortoise_store import TortoiseStorage

__all__ = [
    "ROLE_ADMIN",
    "ROLE_AUTHOR",
    "ROLE_USER",
    "ROLES",
    "ArticleRecord",
    "ArticleWithAuthor",
    "AuthorSummary",
    "NewArticle",
    "NewUser",
    "Storage",
    "StorageConflict",
    "UserRecord",
    "build_storage",
    "MemoryStorage",
    "TortoiseStorage",
]
