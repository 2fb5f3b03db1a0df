# blade/core/store.py
"""
Credential store: persisted users, spaces, memberships, favorites and access tokens.

The store wraps one explicitly passed Tortoise connection instead of relying
on the global default, so every component that needs the database gets it
injected (see ``blade.api.v1.deps.get_store``) and tests can hand in their own.
Uniqueness violations are reported as ``Conflict`` rather than raw storage errors.
"""
import uuid
from typing import Iterable

from tortoise import timezone
from tortoise.backends.base.client import BaseDBAsyncClient
from tortoise.exceptions import IntegrityError
from tortoise.expressions import Q

from blade.core.errors import Conflict
from blade.models.access_token import AccessToken
from blade.models.space import Space, SpaceFavorite, SpaceMember
from blade.models.user import User


def as_uuid(value) -> uuid.UUID | None:
    """Parse an id coming from a URL or token payload; None if it is not a UUID."""
    if value is None:
        return None
    if isinstance(value, uuid.UUID):
        return value
    try:
        return uuid.UUID(str(value))
    except ValueError:
        return None


class CredentialStore:
    def __init__(self, conn: BaseDBAsyncClient):
        self.conn = conn

    # ------------------------------------------------------------------
    # Users
    # ------------------------------------------------------------------
    async def get_user(self, user_id) -> User | None:
        uid = as_uuid(user_id)
        if uid is None:
            return None
        return await User.filter(id=uid).using_db(self.conn).first()

    async def get_user_by_email(self, email: str) -> User | None:
        if not email:
            return None
        return await User.filter(email=email).using_db(self.conn).first()

    async def upsert_user(self, email: str, name: str | None = None, image: str | None = None) -> User:
        """
        Find-or-create a user by email in a single conditional write.

        Existing rows only get name/image refreshed when the new value is
        present and different; nothing else is touched.
        """
        user, created = await User.get_or_create(
            defaults={"name": name, "image": image},
            using_db=self.conn,
            email=email,
        )
        if created:
            return user

        changed = False
        if name and name != user.name:
            user.name = name
            changed = True
        if image and image != user.image:
            user.image = image
            changed = True
        if changed:
            await user.save(using_db=self.conn)
        return user

    async def set_user_role(self, user: User, role: str | None) -> User:
        user.role = role
        await user.save(using_db=self.conn)
        return user

    # ------------------------------------------------------------------
    # Spaces
    # ------------------------------------------------------------------
    async def get_space(self, space_id) -> Space | None:
        sid = as_uuid(space_id)
        if sid is None:
            return None
        return await Space.filter(id=sid).using_db(self.conn).first()

    async def get_membership(self, space_id, user_id) -> SpaceMember | None:
        sid, uid = as_uuid(space_id), as_uuid(user_id)
        if sid is None or uid is None:
            return None
        return await SpaceMember.filter(space_id=sid, user_id=uid).using_db(self.conn).first()

    async def list_spaces_for_user(self, user_id) -> list[Space]:
        """Spaces the user owns or is a member of, ordered by name."""
        uid = as_uuid(user_id)
        if uid is None:
            return []
        member_space_ids = await (
            SpaceMember.filter(user_id=uid).using_db(self.conn).values_list("space_id", flat=True)
        )
        condition = Q(owner_id=uid)
        if member_space_ids:
            condition |= Q(id__in=list(member_space_ids))
        return await Space.filter(condition).using_db(self.conn).order_by("name", "created_at")

    async def identifier_taken(self, owner_id, identifier: str, exclude_space_id=None) -> bool:
        qs = Space.filter(owner_id=owner_id, identifier=identifier).using_db(self.conn)
        if exclude_space_id is not None:
            qs = qs.exclude(id=exclude_space_id)
        return await qs.exists()

    async def create_space(self, owner_id, name: str, identifier: str) -> Space:
        if await self.identifier_taken(owner_id, identifier):
            raise _space_conflict()
        try:
            return await Space.create(
                owner_id=owner_id, name=name, identifier=identifier, using_db=self.conn
            )
        except IntegrityError as exc:
            # Lost a race against a concurrent create with the same identifier
            raise _space_conflict() from exc

    async def update_space(self, space: Space, name: str | None = None, identifier: str | None = None) -> Space:
        if identifier is not None and identifier != space.identifier:
            if await self.identifier_taken(space.owner_id, identifier, exclude_space_id=space.id):
                raise _space_conflict()
            space.identifier = identifier
        if name is not None:
            space.name = name
        try:
            await space.save(using_db=self.conn)
        except IntegrityError as exc:
            raise _space_conflict() from exc
        return space

    async def delete_space(self, space: Space) -> None:
        await space.delete(using_db=self.conn)

    # ------------------------------------------------------------------
    # Members & favorites
    # ------------------------------------------------------------------
    async def list_members(self, space_id) -> list[SpaceMember]:
        return await (
            SpaceMember.filter(space_id=space_id)
            .using_db(self.conn)
            .prefetch_related("user")
            .order_by("created_at")
        )

    async def upsert_member(self, space_id, user_id, role: str) -> SpaceMember:
        member, _ = await SpaceMember.update_or_create(
            defaults={"role": role},
            using_db=self.conn,
            space_id=space_id,
            user_id=user_id,
        )
        await member.fetch_related("user", using_db=self.conn)
        return member

    async def remove_member(self, space_id, user_id) -> int:
        uid = as_uuid(user_id)
        if uid is None:
            return 0
        return await SpaceMember.filter(space_id=space_id, user_id=uid).using_db(self.conn).delete()

    async def add_favorite(self, user_id, space_id) -> None:
        await SpaceFavorite.get_or_create(using_db=self.conn, user_id=user_id, space_id=space_id)

    async def remove_favorite(self, user_id, space_id) -> None:
        await SpaceFavorite.filter(user_id=user_id, space_id=space_id).using_db(self.conn).delete()

    async def favorite_space_ids(self, user_id) -> set[str]:
        ids = await SpaceFavorite.filter(user_id=user_id).using_db(self.conn).values_list("space_id", flat=True)
        return {str(i) for i in ids}

    async def member_roles(self, user_id) -> dict[str, str]:
        rows = await SpaceMember.filter(user_id=user_id).using_db(self.conn).values_list("space_id", "role")
        return {str(space_id): role for space_id, role in rows}

    # ------------------------------------------------------------------
    # Access tokens
    # ------------------------------------------------------------------
    async def create_token(
        self, name: str, token_hash: str, token_prefix: str, space_id=None, created_by_id=None
    ) -> AccessToken:
        token = await AccessToken.create(
            name=name,
            token_hash=token_hash,
            token_prefix=token_prefix,
            space_id=space_id,
            created_by_id=created_by_id,
            using_db=self.conn,
        )
        await token.fetch_related("space", using_db=self.conn)
        return token

    async def get_token(self, token_id) -> AccessToken | None:
        tid = as_uuid(token_id)
        if tid is None:
            return None
        return await AccessToken.filter(id=tid).using_db(self.conn).first()

    async def get_token_by_hash(self, token_hash: str) -> AccessToken | None:
        return await AccessToken.filter(token_hash=token_hash).using_db(self.conn).first()

    async def touch_token(self, token_id) -> None:
        await AccessToken.filter(id=token_id).using_db(self.conn).update(last_used_at=timezone.now())

    async def delete_token(self, token: AccessToken) -> None:
        await token.delete(using_db=self.conn)

    async def list_tokens(self, user_id, space_ids: Iterable) -> list[AccessToken]:
        """Tokens scoped to any of ``space_ids`` plus unscoped tokens created by ``user_id``."""
        condition = Q(space_id__isnull=True, created_by_id=user_id)
        space_ids = list(space_ids)
        if space_ids:
            condition |= Q(space_id__in=space_ids)
        return await (
            AccessToken.filter(condition)
            .using_db(self.conn)
            .prefetch_related("space")
            .order_by("-created_at")
        )


def _space_conflict() -> Conflict:
    return Conflict("A space with this identifier already exists", code="SPACE_EXISTS")
