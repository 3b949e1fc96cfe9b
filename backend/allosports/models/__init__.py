# allosports/models/__init__.py
"""
Database models module initialization.
Exports the Tortoise ORM models used by the relational store.

Models exported:
- User: Account and authentication model
- Article: News article model (belongs to User)
"""
from .user import User
from .article import Article
