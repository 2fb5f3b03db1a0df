# blade/api/v1/routers/tokens.py
"""
Access token management. Session only: a token can never mint or revoke tokens.
The plain secret is returned once, from the create call, and never again.
"""
import logging

from fastapi import APIRouter, Depends

from blade.api.v1.deps import get_policy, get_space_resolver, get_store, require_session
from blade.core.errors import BadRequest, Forbidden, NotFound
from blade.core.policy import SpacePolicy
from blade.core.session import SessionUser
from blade.core.spaces import SpaceResolver
from blade.core.store import CredentialStore
from blade.core.tokens import generate_token_secret
from blade.models.access_token import AccessToken
from blade.schemas.space import TokenCreateIn

logger = logging.getLogger("uvicorn.error")

router = APIRouter(prefix="/tokens", tags=["tokens"])


def _token_to_dict(t: AccessToken) -> dict:
    space = t.space if t.space_id else None
    return {
        "id": str(t.id),
        "name": t.name,
        "tokenPrefix": t.token_prefix,
        "spaceId": str(t.space_id) if t.space_id else None,
        "space": {"id": str(space.id), "name": space.name, "identifier": space.identifier} if space else None,
        "createdAt": t.created_at.isoformat() if t.created_at else None,
        "lastUsedAt": t.last_used_at.isoformat() if t.last_used_at else None,
    }


@router.get("")
async def list_tokens(
    session: SessionUser = Depends(require_session),
    store: CredentialStore = Depends(get_store),
    resolver: SpaceResolver = Depends(get_space_resolver),
):
    """Tokens of every space the user can see plus the user's own unscoped tokens, newest first."""
    spaces = await resolver.get_spaces_for_user(session.id)
    tokens = await store.list_tokens(session.id, [s.id for s in spaces])
    return {"success": True, "data": {"items": [_token_to_dict(t) for t in tokens]}}


@router.post("")
async def create_token(
    body: TokenCreateIn,
    session: SessionUser = Depends(require_session),
    store: CredentialStore = Depends(get_store),
    policy: SpacePolicy = Depends(get_policy),
):
    """
    Mint a token. A space-scoped token needs edit rights on that space.

    Returns:
        dict: token metadata plus ``token``, the plain secret (shown only here)

    Raises:
        BadRequest (400): spaceId refers to no space
        Forbidden (403): Caller cannot edit the space
    """
    name = (body.name or "").strip() or "Unnamed token"
    space_id = body.spaceId or None
    if space_id:
        if await store.get_space(space_id) is None:
            raise BadRequest("Space not found", code="SPACE_NOT_FOUND")
        await policy.can_edit_space(space_id, session.id)

    issued = generate_token_secret()
    token = await store.create_token(
        name=name,
        token_hash=issued.hash,
        token_prefix=issued.prefix,
        space_id=space_id,
        created_by_id=session.id,
    )
    logger.info("[tokens] created token=%s space=%s by=%s", token.id, space_id, session.id)
    return {"success": True, "data": {**_token_to_dict(token), "token": issued.secret}}


@router.delete("/{token_id}")
async def revoke_token(
    token_id: str,
    session: SessionUser = Depends(require_session),
    store: CredentialStore = Depends(get_store),
    policy: SpacePolicy = Depends(get_policy),
):
    """
    Revoke (delete) a token. Its secret stops working immediately.

    Space-scoped tokens can only be revoked by the space owner; unscoped
    tokens only by the user who created them.
    """
    token = await store.get_token(token_id)
    if token is None:
        raise NotFound("Token not found", code="TOKEN_NOT_FOUND")
    if token.space_id:
        await policy.require_owner(token.space_id, session.id)
    elif str(token.created_by_id) != session.id:
        raise Forbidden("Only the creator can revoke this token")

    await store.delete_token(token)
    logger.info("[tokens] revoked token=%s by=%s", token_id, session.id)
    return {"success": True, "data": {"ok": True}}

