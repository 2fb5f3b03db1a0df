# blade/core/spaces.py
"""
Space-default resolver: which space a request targets when it names none.
"""
import re

from blade.core.access import ReadAccess
from blade.core.errors import BadRequest, NotFound, SpaceRequired
from blade.core.policy import SpacePolicy
from blade.core.store import CredentialStore
from blade.models.space import DEFAULT_SPACE_IDENTIFIER, Space

# NOTE: a user may name a space "default" without meaning it as their primary
# one; it still wins the default lookup.

_WHITESPACE = re.compile(r"\s+")
_DISALLOWED = re.compile(r"[^a-z0-9\-_]")


def normalize_identifier(raw: str) -> str:
    """
    Lowercase, turn whitespace runs into hyphens, drop anything outside [a-z0-9-_].
    Raises BadRequest if nothing is left.
    """
    normalized = _DISALLOWED.sub("", _WHITESPACE.sub("-", raw.lower()))
    if not normalized:
        raise BadRequest("identifier must contain at least one letter, number, hyphen or underscore")
    return normalized


class SpaceResolver:
    def __init__(self, store: CredentialStore):
        self.store = store
        self.policy = SpacePolicy(store)

    async def get_spaces_for_user(self, user_id) -> list[Space]:
        """All spaces the user owns or is a member of, ordered by name."""
        return await self.store.list_spaces_for_user(user_id)

    async def resolve_default_space_for_user(self, user_id) -> Space | None:
        """
        The space identified as "default" if the user can see one, else the
        first space by name, else None (the caller should prompt to create one).
        """
        spaces = await self.get_spaces_for_user(user_id)
        for space in spaces:
            if space.identifier == DEFAULT_SPACE_IDENTIFIER:
                return space
        return spaces[0] if spaces else None

    async def resolve_space_for_read(self, access: ReadAccess, requested_space_id: str | None) -> Space:
        """
        Pick the space a content read targets.

        Order: the token's scope (overrides any requested id), then the
        requested id, then the session user's default space. An unscoped
        token without a session must name the space explicitly.
        """
        space_id = access.space_id or requested_space_id
        if space_id:
            if not access.is_token:
                return await self.policy.can_access_space(space_id, access.user_id)
            space = await self.store.get_space(space_id)
            if space is None:
                raise NotFound("Space not found", code="SPACE_NOT_FOUND")
            return space

        if access.is_token:
            raise SpaceRequired()

        space = await self.resolve_default_space_for_user(access.user_id)
        if space is None:
            raise NotFound(
                "Space not found. Create a space in the admin or use an API token.",
                code="SPACE_NOT_FOUND",
            )
        return space

    async def resolve_space_for_write(self, user_id, requested_space_id: str | None) -> Space:
        """Target space of a mutation: the requested one or the user's default, editable by the user."""
        if requested_space_id:
            return await self.policy.can_edit_space(requested_space_id, user_id)
        space = await self.resolve_default_space_for_user(user_id)
        if space is None:
            raise NotFound("Space not found. Create a space first.", code="SPACE_NOT_FOUND")
        return await self.policy.can_edit_space(space.id, user_id)
