# blade/models/space.py
"""
Database models for spaces (tenants) and who may see them.
"""
import uuid
from tortoise import fields, models

# Reserved identifier of a user's primary space
DEFAULT_SPACE_IDENTIFIER = "default"

MEMBER_ROLE_EDITOR = "editor"
MEMBER_ROLE_VIEWER = "viewer"
MEMBER_ROLES = (MEMBER_ROLE_EDITOR, MEMBER_ROLE_VIEWER)

class Space(models.Model):
    """
    A tenant/workspace. Exactly one owner, any number of members.

    The identifier is a machine-friendly slug, unique per owner.
    Deleting a space cascades to its members, favorites, tokens and content.
    """
    id = fields.UUIDField(pk=True, default=uuid.uuid4)
    owner = fields.ForeignKeyField(
        "models.User",
        related_name="spaces",
        on_delete=fields.CASCADE,
    )
    name = fields.CharField(max_length=256)
    identifier = fields.CharField(max_length=128)
    created_at = fields.DatetimeField(auto_now_add=True)
    updated_at = fields.DatetimeField(auto_now=True)

    class Meta:
        table = "spaces"
        unique_together = (("owner", "identifier"),)

class SpaceMember(models.Model):
    """
    Grants a non-owner user access to a space.
    role = "editor" may edit content, members and tokens; role = "viewer" is read-only.
    """
    id = fields.UUIDField(pk=True, default=uuid.uuid4)
    space = fields.ForeignKeyField("models.Space", related_name="members", on_delete=fields.CASCADE)
    user = fields.ForeignKeyField("models.User", related_name="memberships", on_delete=fields.CASCADE)
    role = fields.CharField(max_length=16, default=MEMBER_ROLE_EDITOR)
    created_at = fields.DatetimeField(auto_now_add=True)

    class Meta:
        table = "space_members"
        unique_together = (("space", "user"),)

class SpaceFavorite(models.Model):
    """Per-user bookmark of a space. UI convenience only, carries no permission."""
    id = fields.UUIDField(pk=True, default=uuid.uuid4)
    user = fields.ForeignKeyField("models.User", related_name="favorites", on_delete=fields.CASCADE)
    space = fields.ForeignKeyField("models.Space", related_name="favorited_by", on_delete=fields.CASCADE)
    created_at = fields.DatetimeField(auto_now_add=True)

    class Meta:
        table = "space_favorites"
        unique_together = (("user", "space"),)
