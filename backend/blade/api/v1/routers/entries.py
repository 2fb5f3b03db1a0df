# blade/api/v1/routers/entries.py
from fastapi import APIRouter, Depends, Query
from tortoise import timezone
from tortoise.exceptions import IntegrityError
from tortoise.transactions import in_transaction

from blade.api.v1.deps import get_space_resolver, require_read_access, require_session
from blade.api.v1.routers.components import parse_json_document
from blade.core.access import ReadAccess
from blade.core.errors import BadRequest, Conflict, NotFound
from blade.core.session import SessionUser
from blade.core.spaces import SpaceResolver
from blade.core.store import as_uuid
from blade.models.content import ContentType, Entry
from blade.models.space import Space
from blade.schemas.content import EntryCreateIn, EntryUpdateIn, ReorderIn

router = APIRouter(prefix="/entries", tags=["entries"])

def _entry_to_dict(e: Entry) -> dict:
    """Convert an Entry (with content_type fetched) to its API representation."""
    ct = e.content_type
    return {
        "id": str(e.id),
        "spaceId": str(e.space_id),
        "slug": e.slug,
        "name": e.name,
        "content": e.content,
        "isPublished": e.is_published,
        "publishedAt": e.published_at.isoformat() if e.published_at else None,
        "position": e.position,
        "contentType": {"id": str(ct.id), "name": ct.name, "type": ct.type},
        "createdAt": e.created_at.isoformat() if e.created_at else None,
        "updatedAt": e.updated_at.isoformat() if e.updated_at else None,
    }

def _slug_conflict() -> Conflict:
    return Conflict("An entry with this slug already exists", code="ENTRY_EXISTS")

async def _get_entry(space: Space, slug: str) -> Entry:
    e = await Entry.filter(space_id=space.id, slug=slug).prefetch_related("content_type").first()
    if e is None:
        raise NotFound("Entry not found", code="ENTRY_NOT_FOUND")
    return e

# ===== Reads (session or access token) =====
@router.get("")
async def list_entries(
    space: str | None = Query(default=None, description="Space id; ignored for space-scoped tokens"),
    published: str | None = Query(default=None, description='"true" to list published entries only'),
    access: ReadAccess = Depends(require_read_access),
    resolver: SpaceResolver = Depends(get_space_resolver),
):
    """
    Entries of a space in manual order, most recently updated first within a position.

    A space-scoped token always reads its own space, whatever ?space= says.
    """
    target = await resolver.resolve_space_for_read(access, space)
    qs = Entry.filter(space_id=target.id)
    if published == "true":
        qs = qs.filter(is_published=True)
    rows = await qs.prefetch_related("content_type").order_by("position", "-updated_at")
    return {"success": True, "data": [_entry_to_dict(e) for e in rows]}

@router.get("/{slug}")
async def get_entry(
    slug: str,
    space: str | None = Query(default=None),
    access: ReadAccess = Depends(require_read_access),
    resolver: SpaceResolver = Depends(get_space_resolver),
):
    """Single entry by slug."""
    target = await resolver.resolve_space_for_read(access, space)
    e = await _get_entry(target, slug)
    return {"success": True, "data": _entry_to_dict(e)}

# ===== Writes (session + edit rights) =====
@router.post("/reorder")
async def reorder_entries(
    body: ReorderIn,
    session: SessionUser = Depends(require_session),
    resolver: SpaceResolver = Depends(get_space_resolver),
):
    """
    Set entry positions to the order of ``entryIds``.

    Raises:
        BadRequest (400): Empty list, or an id that does not belong to the space
    """
    if not body.entryIds:
        raise BadRequest("entryIds must be a non-empty array of entry ids")
    target = await resolver.resolve_space_for_write(session.id, body.spaceId)

    ids = [as_uuid(i) for i in body.entryIds]
    if any(i is None for i in ids):
        raise BadRequest("All entry ids must belong to this space")
    found = await Entry.filter(id__in=ids, space_id=target.id).values_list("id", flat=True)
    if set(found) != set(ids):
        raise BadRequest("All entry ids must belong to this space")

    async with in_transaction() as conn:
        for position, entry_id in enumerate(ids):
            await Entry.filter(id=entry_id).using_db(conn).update(position=position)
    return {"success": True, "data": {"ok": True}}

@router.post("")
async def create_entry(
    body: EntryCreateIn,
    session: SessionUser = Depends(require_session),
    resolver: SpaceResolver = Depends(get_space_resolver),
):
    """
    Create an entry (owner or editor).

    Defaults: slug "untitled", name "Untitled", content type "page",
    space = the caller's default space.

    Raises:
        BadRequest (400): Content type not found in the space
        Conflict (409): Slug already used in the space
    """
    target = await resolver.resolve_space_for_write(session.id, body.spaceId)

    if body.contentTypeId:
        ct_id = as_uuid(body.contentTypeId)
        ct = await ContentType.get_or_none(id=ct_id, space_id=target.id) if ct_id else None
    else:
        ct = await ContentType.get_or_none(space_id=target.id, type="page")
    if ct is None:
        raise BadRequest("Content type not found", code="CONTENT_TYPE_NOT_FOUND")

    slug = (body.slug or "").strip() or "untitled"
    if await Entry.filter(space_id=target.id, slug=slug).exists():
        raise _slug_conflict()
    try:
        e = await Entry.create(
            space_id=target.id,
            content_type_id=ct.id,
            slug=slug,
            name=(body.name or "").strip() or "Untitled",
            content=parse_json_document(body.content, "content"),
        )
    except IntegrityError:
        raise _slug_conflict()
    await e.fetch_related("content_type")
    return {"success": True, "data": _entry_to_dict(e)}

@router.put("/{slug}")
async def update_entry(
    slug: str,
    body: EntryUpdateIn,
    session: SessionUser = Depends(require_session),
    resolver: SpaceResolver = Depends(get_space_resolver),
):
    """
    Update name, slug, content and/or publish state of an entry (owner or editor).
    Only fields present in the body change. Publishing stamps publishedAt,
    unpublishing clears it.
    """
    target = await resolver.resolve_space_for_write(session.id, body.spaceId)
    e = await _get_entry(target, slug)
    provided = body.model_fields_set

    if "name" in provided and body.name is not None:
        e.name = body.name
    if "slug" in provided and body.slug and body.slug != e.slug:
        if await Entry.filter(space_id=target.id, slug=body.slug).exists():
            raise _slug_conflict()
        e.slug = body.slug
    if "content" in provided:
        e.content = parse_json_document(body.content, "content")
    if "isPublished" in provided and body.isPublished is not None:
        e.is_published = body.isPublished
        e.published_at = timezone.now() if body.isPublished else None

    try:
        await e.save()
    except IntegrityError:
        raise _slug_conflict()
    return {"success": True, "data": _entry_to_dict(e)}

@router.delete("/{slug}")
async def delete_entry(
    slug: str,
    space: str | None = Query(default=None),
    session: SessionUser = Depends(require_session),
    resolver: SpaceResolver = Depends(get_space_resolver),
):
    """Delete an entry by slug (owner or editor)."""
    target = await resolver.resolve_space_for_write(session.id, space)
    e = await _get_entry(target, slug)
    await e.delete()
    return {"success": True, "data": {"ok": True}}
