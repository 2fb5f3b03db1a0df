# blade/models/access_token.py
import uuid
from typing import Optional
from tortoise import fields, models

class AccessToken(models.Model):
    """
    Read-only bearer credential for the content API.
    - token_hash: sha256(plain text secret) 64-character hexadecimal string, unique (plain text not stored)
    - token_prefix: First 12 characters of the secret plus an ellipsis, for listings
    - space: Scope of the token; null means "no fixed space". Set once at creation, never changed
    - created_by: User who minted the token (revokes unscoped tokens)
    - last_used_at: Best-effort usage timestamp, may lag behind real usage
    """
    id = fields.UUIDField(pk=True, default=uuid.uuid4)
    name = fields.CharField(max_length=256)
    token_hash = fields.CharField(max_length=64, unique=True, index=True)
    token_prefix = fields.CharField(max_length=16)

    space: Optional[fields.ForeignKeyNullableRelation["Space"]] = fields.ForeignKeyField(
        "models.Space", related_name="access_tokens", null=True, on_delete=fields.CASCADE
    )
    created_by: Optional[fields.ForeignKeyNullableRelation["User"]] = fields.ForeignKeyField(
        "models.User", related_name="access_tokens", null=True, on_delete=fields.SET_NULL
    )

    created_at = fields.DatetimeField(auto_now_add=True)
    last_used_at = fields.DatetimeField(null=True)

    class Meta:
        table = "access_tokens"
