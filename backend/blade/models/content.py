# blade/models/content.py
"""
Database models for space content: block schemas (components), content
types and entries. Schemas and entry content are opaque JSON documents.
"""
import uuid
from tortoise import fields, models

class Component(models.Model):
    """Reusable content-block schema, e.g. "hero" or "text"."""
    id = fields.UUIDField(pk=True, default=uuid.uuid4)
    space = fields.ForeignKeyField("models.Space", related_name="components", on_delete=fields.CASCADE)
    name = fields.CharField(max_length=256)
    type = fields.CharField(max_length=128)  # Block type key referenced from entry content
    schema = fields.JSONField(default=dict)
    is_root = fields.BooleanField(default=False)
    is_nestable = fields.BooleanField(default=True)
    created_at = fields.DatetimeField(auto_now_add=True)
    updated_at = fields.DatetimeField(auto_now=True)

    class Meta:
        table = "components"
        unique_together = (("space", "type"),)

class ContentType(models.Model):
    """Shape of an entry: its own fields plus the blocks it allows."""
    id = fields.UUIDField(pk=True, default=uuid.uuid4)
    space = fields.ForeignKeyField("models.Space", related_name="content_types", on_delete=fields.CASCADE)
    name = fields.CharField(max_length=256)
    type = fields.CharField(max_length=128)
    schema = fields.JSONField(default=dict)
    created_at = fields.DatetimeField(auto_now_add=True)
    updated_at = fields.DatetimeField(auto_now=True)

    class Meta:
        table = "content_types"
        unique_together = (("space", "type"),)

class Entry(models.Model):
    """A content record of one content type, addressed by slug within its space."""
    id = fields.UUIDField(pk=True, default=uuid.uuid4)
    space = fields.ForeignKeyField("models.Space", related_name="entries", on_delete=fields.CASCADE)
    content_type = fields.ForeignKeyField(
        "models.ContentType", related_name="entries", on_delete=fields.CASCADE
    )
    slug = fields.CharField(max_length=256)
    name = fields.CharField(max_length=256)
    content = fields.JSONField(default=dict)
    is_published = fields.BooleanField(default=False)
    published_at = fields.DatetimeField(null=True)
    position = fields.IntField(default=0)  # Manual ordering within the space
    created_at = fields.DatetimeField(auto_now_add=True)
    updated_at = fields.DatetimeField(auto_now=True)

    class Meta:
        table = "entries"
        unique_together = (("space", "slug"),)
