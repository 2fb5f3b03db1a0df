# blade/api/v1/routers/content_types.py
from fastapi import APIRouter, Depends, Query

from blade.api.v1.deps import get_space_resolver, require_read_access
from blade.core.access import ReadAccess
from blade.core.spaces import SpaceResolver
from blade.models.content import ContentType

router = APIRouter(prefix="/content-types", tags=["content-types"])

@router.get("")
async def list_content_types(
    space: str | None = Query(default=None),
    access: ReadAccess = Depends(require_read_access),
    resolver: SpaceResolver = Depends(get_space_resolver),
):
    """Content types of a space (id, name, type), ordered by name."""
    target = await resolver.resolve_space_for_read(access, space)
    rows = await ContentType.filter(space_id=target.id).order_by("name")
    items = [{"id": str(ct.id), "name": ct.name, "type": ct.type} for ct in rows]
    return {"success": True, "data": items}
