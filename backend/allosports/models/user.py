# allosports/models/user.py
"""
Database model for users.
Represents an account in the system, containing authentication credentials,
profile information, and role-based access control.
"""
import uuid
from tortoise import fields, models


class User(models.Model):
    """
    User database model.

    Relationships:
    - Has many Articles (one-to-many, via related_name="articles")

    Security:
    - Password is stored as a bcrypt hash and never leaves the storage layer
    - Username and email are each unique across all users
    - Role determines access level (USER / AUTHOR / ADMIN)
    """
    id = fields.UUIDField(pk=True, default=uuid.uuid4)
    username = fields.CharField(max_length=256, unique=True, index=True)
    email = fields.CharField(max_length=256, unique=True, index=True)
    password_hash = fields.CharField(max_length=255)
    first_name = fields.CharField(max_length=128, null=True)
    last_name = fields.CharField(max_length=128, null=True)
    profile_image_url = fields.TextField(null=True)
    role = fields.CharField(max_length=20, default="USER")
    created_at = fields.DatetimeField(auto_now_add=True)

    class Meta:
        """Tortoise ORM metadata configuration."""
        table = "users"
