# blade/api/v1/routers/account.py
from fastapi import APIRouter, Depends

from blade.api.v1.deps import get_store, require_session
from blade.api.v1.routers.auth import user_to_dict
from blade.core.errors import BadRequest, NotFound
from blade.core.session import SessionUser
from blade.core.store import CredentialStore
from blade.models.user import ALLOWED_USER_ROLES
from blade.schemas.auth import RoleUpdateIn

router = APIRouter(prefix="/account", tags=["account"])

@router.patch("/role")
async def update_role(
    body: RoleUpdateIn,
    session: SessionUser = Depends(require_session),
    store: CredentialStore = Depends(get_store),
):
    """
    Set or clear the profile role of the signed-in user.

    The role is a profile tag only; it grants nothing.

    Raises:
        BadRequest (400): If the role is not one of ALLOWED_USER_ROLES
    """
    role = body.role or None
    if role is not None and role not in ALLOWED_USER_ROLES:
        raise BadRequest(f"role must be one of: {', '.join(ALLOWED_USER_ROLES)}", code="INVALID_ROLE")

    user = await store.get_user(session.id)
    if user is None:
        raise NotFound("User not found", code="USER_NOT_FOUND")
    await store.set_user_role(user, role)
    return {"success": True, "data": user_to_dict(user)}
