# blade/core/bootstrap.py
"""
Bootstrap module for application initialization.
Seeds a usable "default" space on first startup and gives new spaces the
block schemas and content type they need before entries can be created.
"""
import logging

from tortoise import timezone

from blade.config import settings
from blade.core.store import CredentialStore
from blade.models.content import Component, ContentType, Entry
from blade.models.space import DEFAULT_SPACE_IDENTIFIER, Space

logger = logging.getLogger("uvicorn.error")

DEFAULT_COMPONENTS = [
    {
        "name": "Hero",
        "type": "hero",
        "schema": {
            "type": "hero",
            "fields": [
                {"name": "headline", "type": "text", "required": True},
                {"name": "subheadline", "type": "textarea"},
                {"name": "image", "type": "asset"},
                {"name": "cta_text", "type": "text"},
                {"name": "cta_link", "type": "link"},
            ],
        },
    },
    {
        "name": "Text",
        "type": "text",
        "schema": {
            "type": "text",
            "fields": [{"name": "content", "type": "richtext", "required": True}],
        },
    },
    {
        "name": "Image",
        "type": "image",
        "schema": {
            "type": "image",
            "fields": [
                {"name": "image", "type": "asset", "required": True},
                {"name": "caption", "type": "text"},
                {"name": "alt", "type": "text"},
            ],
        },
    },
]

PAGE_CONTENT_TYPE = {
    "name": "Page",
    "type": "page",
    "schema": {
        "allowedBlocks": ["hero", "text", "image"],
        "fields": [
            {"name": "title", "type": "text", "required": True},
            {"name": "meta_description", "type": "textarea"},
        ],
    },
}

HOME_ENTRY_CONTENT = {
    "title": "Welcome",
    "meta_description": "Edit your content here.",
    "body": [
        {
            "type": "hero",
            "headline": "Welcome to Blade",
            "subheadline": "A headless CMS. Edit content in the admin.",
            "cta_text": "Go to Admin",
            "cta_link": "/admin",
        },
        {"type": "text", "content": "<p>Add more blocks in the admin to build your page.</p>"},
    ],
}

async def ensure_space_has_content_types(space: Space, using_db=None) -> ContentType:
    """
    Create the hero/text/image components and the "page" content type for a space.
    Idempotent: existing rows with the same type are left alone.
    Returns the page content type.
    """
    for block in DEFAULT_COMPONENTS:
        await Component.get_or_create(
            defaults={
                "name": block["name"],
                "schema": block["schema"],
                "is_root": False,
                "is_nestable": True,
            },
            using_db=using_db,
            space_id=space.id,
            type=block["type"],
        )
    page_type, _ = await ContentType.get_or_create(
        defaults={"name": PAGE_CONTENT_TYPE["name"], "schema": PAGE_CONTENT_TYPE["schema"]},
        using_db=using_db,
        space_id=space.id,
        type=PAGE_CONTENT_TYPE["type"],
    )
    return page_type

async def ensure_seed_space(store: CredentialStore) -> Space | None:
    """
    Make sure the seed user owns a "default" space with a published home entry.
    Only runs when SEED_ON_STARTUP is enabled. Safe to call on every startup.
    """
    if not settings.seed_on_startup:
        logger.warning("[bootstrap] SEED_ON_STARTUP disabled -> skip seeding default space.")
        return None

    user = await store.upsert_user(settings.seed_user_email.strip().lower(), name="Seed User")
    space, created = await Space.get_or_create(
        defaults={"name": "Default Space"},
        using_db=store.conn,
        owner_id=user.id,
        identifier=DEFAULT_SPACE_IDENTIFIER,
    )
    page_type = await ensure_space_has_content_types(space, using_db=store.conn)
    await Entry.get_or_create(
        defaults={
            "content_type_id": page_type.id,
            "name": "Home",
            "is_published": True,
            "published_at": timezone.now(),
            "content": HOME_ENTRY_CONTENT,
        },
        using_db=store.conn,
        space_id=space.id,
        slug="home",
    )
    if created:
        logger.warning("[bootstrap] Created default space -> owner=%s space=%s", user.email, space.id)
    return space
