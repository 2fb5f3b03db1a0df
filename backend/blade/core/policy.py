# blade/core/policy.py
"""
Authorization policy: the single place that decides whether a session user
may read or write a space.

Ownership is always checked first and short-circuits membership lookups.
Viewer memberships grant read access only. Access tokens never reach this
module; they grant read access on their own (see ``blade.core.access``).
"""
from blade.core.errors import Forbidden, NotFound
from blade.core.store import CredentialStore
from blade.models.space import MEMBER_ROLE_EDITOR, Space


def _is_owner(space: Space, user_id) -> bool:
    return str(space.owner_id) == str(user_id)


class SpacePolicy:
    def __init__(self, store: CredentialStore):
        self.store = store

    async def _get_space(self, space_id) -> Space:
        space = await self.store.get_space(space_id)
        if space is None:
            raise NotFound("Space not found", code="SPACE_NOT_FOUND")
        return space

    async def can_access_space(self, space_id, user_id) -> Space:
        """Owner or any member may read. Returns the space, raises NotFound/Forbidden."""
        space = await self._get_space(space_id)
        if _is_owner(space, user_id):
            return space
        if await self.store.get_membership(space.id, user_id) is not None:
            return space
        raise Forbidden("You do not have access to this space")

    async def can_edit_space(self, space_id, user_id) -> Space:
        """Owner or an editor member may write. Returns the space, raises NotFound/Forbidden."""
        space = await self._get_space(space_id)
        if _is_owner(space, user_id):
            return space
        member = await self.store.get_membership(space.id, user_id)
        if member is not None and member.role == MEMBER_ROLE_EDITOR:
            return space
        raise Forbidden("You do not have permission to edit this space")

    async def require_owner(self, space_id, user_id) -> Space:
        """Only the owner may delete the space or revoke tokens scoped to it."""
        space = await self._get_space(space_id)
        if _is_owner(space, user_id):
            return space
        raise Forbidden("Only the space owner can do this")
