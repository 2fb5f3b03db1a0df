# blade/models/user.py
"""
Database model for users.
A user is created the first time an identity provider vouches for an email
address and refreshed on every later sign-in.
"""
import uuid
from tortoise import fields, models

# Optional profile tag a user can pick on the account page
ALLOWED_USER_ROLES = ("developer", "marketeer", "content_creator", "website_owner")

class User(models.Model):
    """
    User database model.

    Relationships:
    - Owns many Spaces (via related_name="spaces")
    - Has many SpaceMember rows (via related_name="memberships")
    - Has many SpaceFavorite rows (via related_name="favorites")

    Users are never deleted by the auth layer; deleting one cascades to the
    spaces it owns.
    """
    id = fields.UUIDField(pk=True, default=uuid.uuid4)  # Primary key: stable internal identifier
    email = fields.CharField(max_length=256, unique=True, null=True, index=True)  # Upsert key on sign-in
    name = fields.CharField(max_length=256, null=True)  # Display name from the identity provider
    image = fields.CharField(max_length=1024, null=True)  # Avatar URL from the identity provider
    role = fields.CharField(max_length=32, null=True)  # Optional profile tag, see ALLOWED_USER_ROLES
    created_at = fields.DatetimeField(auto_now_add=True)
    updated_at = fields.DatetimeField(auto_now=True)

    class Meta:
        """Tortoise ORM metadata configuration."""
        table = "users"
