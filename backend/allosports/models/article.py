# allosports/models/article.py
"""
Database model for articles.
"""
import uuid
from tortoise import fields, models


class Article(models.Model):
    """
    Article database model.

    Relationships:
    - Belongs to a User (many-to-one); users are never deleted, so the
      foreign key restricts deletion instead of cascading.
    """
    id = fields.UUIDField(pk=True, default=uuid.uuid4)
    title = fields.TextField()
    slug = fields.CharField(max_length=150, unique=True, index=True)  # Derived from title server-side
    excerpt = fields.TextField()
    content = fields.TextField()
    category = fields.CharField(max_length=50)  # League code, e.g. "NHL"
    image_url = fields.TextField(null=True)
    image_credit = fields.TextField(null=True)
    author = fields.ForeignKeyField(
        "models.User",
        related_name="articles",
        on_delete=fields.RESTRICT,
    )
    views = fields.IntField(default=0)  # Only ever incremented, via F("views") + 1
    published = fields.BooleanField(default=False)
    featured = fields.BooleanField(default=False)
    # Lowercased title/excerpt/content/category, matched by search_articles
    search_text = fields.TextField(default="")
    created_at = fields.DatetimeField(auto_now_add=True)
    updated_at = fields.DatetimeField(auto_now=True)

    class Meta:
        table = "articles"
