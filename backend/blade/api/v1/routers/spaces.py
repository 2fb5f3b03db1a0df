# blade/api/v1/routers/spaces.py

import logging

from fastapi import APIRouter, Depends, Response, status

from blade.api.v1.deps import get_policy, get_space_resolver, get_store, require_session
from blade.core.bootstrap import ensure_space_has_content_types
from blade.core.errors import BadRequest, NotFound
from blade.core.policy import SpacePolicy
from blade.core.session import SessionUser
from blade.core.spaces import SpaceResolver, normalize_identifier
from blade.core.store import CredentialStore
from blade.models.space import MEMBER_ROLE_EDITOR, MEMBER_ROLES, Space, SpaceMember
from blade.schemas.space import MemberAddIn, SpaceCreateIn, SpaceUpdateIn

logger = logging.getLogger("uvicorn.error")

router = APIRouter(prefix="/spaces", tags=["spaces"])


def space_to_dict(s: Space) -> dict:
    """Convert a Space row to its API representation."""
    return {
        "id": str(s.id),
        "name": s.name,
        "identifier": s.identifier,
        "ownerId": str(s.owner_id),
        "createdAt": s.created_at.isoformat() if s.created_at else None,
        "updatedAt": s.updated_at.isoformat() if s.updated_at else None,
    }


def _member_to_dict(m: SpaceMember) -> dict:
    return {
        "spaceId": str(m.space_id),
        "userId": str(m.user_id),
        "role": m.role,
        "createdAt": m.created_at.isoformat() if m.created_at else None,
        "user": {"id": str(m.user.id), "email": m.user.email, "name": m.user.name, "image": m.user.image},
    }


# ==============================================================================
# I. Spaces
# ==============================================================================
@router.get("")
async def list_spaces(
    session: SessionUser = Depends(require_session),
    store: CredentialStore = Depends(get_store),
    resolver: SpaceResolver = Depends(get_space_resolver),
):
    """
    Spaces the signed-in user owns or is a member of, ordered by name.

    Each item carries isOwner, role ("owner", "editor" or "viewer") and isFavorite.
    """
    spaces = await resolver.get_spaces_for_user(session.id)
    favorites = await store.favorite_space_ids(session.id)
    roles = await store.member_roles(session.id)
    items = []
    for s in spaces:
        is_owner = str(s.owner_id) == session.id
        items.append({
            **space_to_dict(s),
            "isOwner": is_owner,
            "role": "owner" if is_owner else roles.get(str(s.id)),
            "isFavorite": str(s.id) in favorites,
        })
    return {"success": True, "data": {"items": items}}


@router.post("")
async def create_space(
    body: SpaceCreateIn,
    session: SessionUser = Depends(require_session),
    store: CredentialStore = Depends(get_store),
):
    """
    Create a space owned by the signed-in user.

    The identifier is normalized first. The new space gets the default
    components and "page" content type so entries can be created right away.

    Raises:
        BadRequest (400): Missing name, or identifier empty after normalization
        Conflict (409): The user already has a space with this identifier
    """
    name = body.name.strip()
    if not name:
        raise BadRequest("name and identifier are required")
    identifier = normalize_identifier(body.identifier)

    space = await store.create_space(session.id, name, identifier)
    await ensure_space_has_content_types(space, using_db=store.conn)
    logger.info("[spaces] created space=%s identifier=%s owner=%s", space.id, identifier, session.id)
    return {"success": True, "data": space_to_dict(space)}


@router.patch("/{space_id}")
async def update_space(
    space_id: str,
    body: SpaceUpdateIn,
    session: SessionUser = Depends(require_session),
    store: CredentialStore = Depends(get_store),
    policy: SpacePolicy = Depends(get_policy),
):
    """
    Rename and/or re-identify a space (owner or editor).

    Raises:
        NotFound (404) / Forbidden (403): From the edit check
        BadRequest (400): Blank name or identifier empty after normalization
        Conflict (409): Identifier already used by another space of the owner
    """
    space = await policy.can_edit_space(space_id, session.id)

    name = None
    if body.name is not None:
        name = body.name.strip()
        if not name:
            raise BadRequest("name must be a non-empty string")
    identifier = normalize_identifier(body.identifier) if body.identifier is not None else None

    if name is None and identifier is None:
        return {"success": True, "data": space_to_dict(space)}
    space = await store.update_space(space, name=name, identifier=identifier)
    return {"success": True, "data": space_to_dict(space)}


@router.delete("/{space_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_space(
    space_id: str,
    session: SessionUser = Depends(require_session),
    store: CredentialStore = Depends(get_store),
    policy: SpacePolicy = Depends(get_policy),
):
    """Delete a space and everything in it. Owner only."""
    space = await policy.require_owner(space_id, session.id)
    await store.delete_space(space)
    logger.info("[spaces] deleted space=%s by owner=%s", space_id, session.id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# ==============================================================================
# II. Members
# ==============================================================================
@router.get("/{space_id}/members")
async def list_members(
    space_id: str,
    session: SessionUser = Depends(require_session),
    store: CredentialStore = Depends(get_store),
    policy: SpacePolicy = Depends(get_policy),
):
    """Members of a space, oldest first (owner or editor)."""
    space = await policy.can_edit_space(space_id, session.id)
    members = await store.list_members(space.id)
    return {"success": True, "data": {"items": [_member_to_dict(m) for m in members]}}


@router.post("/{space_id}/members")
async def add_member(
    space_id: str,
    body: MemberAddIn,
    session: SessionUser = Depends(require_session),
    store: CredentialStore = Depends(get_store),
    policy: SpacePolicy = Depends(get_policy),
):
    """
    Add an existing user to a space, or change their role (owner or editor).

    The invitee must have signed in at least once. Adding the same user
    again updates the role instead of duplicating the membership.

    Raises:
        BadRequest (400): Missing email, inviting yourself, or inviting the owner
        NotFound (404): No account with that email
    """
    space = await policy.can_edit_space(space_id, session.id)

    email = body.email.strip().lower()
    if not email:
        raise BadRequest("email is required")
    role = body.role if body.role in MEMBER_ROLES else MEMBER_ROLE_EDITOR

    invitee = await store.get_user_by_email(email)
    if invitee is None:
        raise NotFound(
            "No account found with that email. They must sign in once to create an account.",
            code="USER_NOT_FOUND",
        )
    if str(invitee.id) == session.id:
        raise BadRequest("You already own or have access to this space.")
    if str(invitee.id) == str(space.owner_id):
        raise BadRequest("Cannot add the space owner as a member.")

    member = await store.upsert_member(space.id, invitee.id, role)
    return {"success": True, "data": _member_to_dict(member)}


@router.delete("/{space_id}/members/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
async def remove_member(
    space_id: str,
    user_id: str,
    session: SessionUser = Depends(require_session),
    store: CredentialStore = Depends(get_store),
    policy: SpacePolicy = Depends(get_policy),
):
    """Remove a member (owner or editor). 404 if the user is not a member."""
    space = await policy.can_edit_space(space_id, session.id)
    deleted = await store.remove_member(space.id, user_id)
    if not deleted:
        raise NotFound("Member not found", code="MEMBER_NOT_FOUND")
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# ==============================================================================
# III. Favorites
# ==============================================================================
@router.post("/{space_id}/favorite")
async def add_favorite(
    space_id: str,
    session: SessionUser = Depends(require_session),
    store: CredentialStore = Depends(get_store),
    policy: SpacePolicy = Depends(get_policy),
):
    """Bookmark a space the user can see. Idempotent."""
    space = await policy.can_access_space(space_id, session.id)
    await store.add_favorite(session.id, space.id)
    return {"success": True, "data": {"ok": True}}


@router.delete("/{space_id}/favorite")
async def remove_favorite(
    space_id: str,
    session: SessionUser = Depends(require_session),
    store: CredentialStore = Depends(get_store),
    policy: SpacePolicy = Depends(get_policy),
):
    """Remove a bookmark. Idempotent."""
    space = await policy.can_access_space(space_id, session.id)
    await store.remove_favorite(session.id, space.id)
    return {"success": True, "data": {"ok": True}}
