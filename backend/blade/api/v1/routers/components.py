# blade/api/v1/routers/components.py
import json

from fastapi import APIRouter, Depends, Query
from tortoise.exceptions import IntegrityError

from blade.api.v1.deps import get_policy, get_space_resolver, require_read_access, require_session
from blade.core.access import ReadAccess
from blade.core.errors import BadRequest, Conflict, NotFound
from blade.core.policy import SpacePolicy
from blade.core.session import SessionUser
from blade.core.spaces import SpaceResolver
from blade.core.store import as_uuid
from blade.models.content import Component
from blade.schemas.content import ComponentCreateIn

router = APIRouter(prefix="/components", tags=["components"])

def parse_json_document(value, field: str):
    """Accept a JSON object/array as-is or a JSON-encoded string; None becomes {}."""
    if value is None:
        return {}
    if isinstance(value, str):
        try:
            return json.loads(value)
        except ValueError:
            raise BadRequest(f"{field} must be valid JSON")
    return value

def _component_to_dict(c: Component) -> dict:
    return {
        "id": str(c.id),
        "spaceId": str(c.space_id),
        "name": c.name,
        "type": c.type,
        "schema": c.schema,
        "isRoot": c.is_root,
        "isNestable": c.is_nestable,
        "createdAt": c.created_at.isoformat() if c.created_at else None,
        "updatedAt": c.updated_at.isoformat() if c.updated_at else None,
    }

@router.get("")
async def list_components(
    space: str | None = Query(default=None, description="Space id; ignored for space-scoped tokens"),
    access: ReadAccess = Depends(require_read_access),
    resolver: SpaceResolver = Depends(get_space_resolver),
):
    """Block schemas of a space, ordered by name. Session or access token."""
    target = await resolver.resolve_space_for_read(access, space)
    rows = await Component.filter(space_id=target.id).order_by("name")
    return {"success": True, "data": [_component_to_dict(c) for c in rows]}

@router.post("")
async def create_component(
    body: ComponentCreateIn,
    session: SessionUser = Depends(require_session),
    resolver: SpaceResolver = Depends(get_space_resolver),
):
    """
    Define a new block schema (owner or editor).

    Raises:
        Conflict (409): The space already has a component of this type
    """
    target = await resolver.resolve_space_for_write(session.id, body.spaceId)
    block_type = body.type.strip()
    if not block_type or not body.name.strip():
        raise BadRequest("name and type are required")
    if await Component.filter(space_id=target.id, type=block_type).exists():
        raise Conflict("A block with this type already exists", code="COMPONENT_EXISTS")
    try:
        c = await Component.create(
            space_id=target.id,
            name=body.name.strip(),
            type=block_type,
            schema=parse_json_document(body.schema_, "schema"),
            is_root=body.isRoot,
            is_nestable=body.isNestable,
        )
    except IntegrityError:
        raise Conflict("A block with this type already exists", code="COMPONENT_EXISTS")
    return {"success": True, "data": _component_to_dict(c)}

@router.delete("/{component_id}")
async def delete_component(
    component_id: str,
    session: SessionUser = Depends(require_session),
    policy: SpacePolicy = Depends(get_policy),
):
    """Delete a block schema (owner or editor of its space)."""
    cid = as_uuid(component_id)
    c = await Component.get_or_none(id=cid) if cid else None
    if c is None:
        raise NotFound("Block not found", code="COMPONENT_NOT_FOUND")
    await policy.can_edit_space(c.space_id, session.id)
    await c.delete()
    return {"success": True, "data": {"ok": True}}
