# blade/core/session.py
"""
Session resolver: bridges an externally authenticated identity to an
internal user id.
"""
import logging
from dataclasses import dataclass

import jwt  # PyJWT

from blade.core.errors import AuthenticationRequired
from blade.core.security import create_session_token, decode_session_token
from blade.core.store import CredentialStore
from blade.models.user import User

logger = logging.getLogger("uvicorn.error")


@dataclass(frozen=True)
class Identity:
    """What the identity provider vouches for."""
    email: str
    name: str | None = None
    picture: str | None = None


@dataclass(frozen=True)
class SessionUser:
    id: str
    email: str | None


class SessionResolver:
    def __init__(self, store: CredentialStore):
        self.store = store

    async def sign_in(self, identity: Identity) -> tuple[User, str]:
        """Upsert the user for ``identity`` and issue a session token for it."""
        email = identity.email.strip().lower()
        user = await self.store.upsert_user(email, name=identity.name, image=identity.picture)
        logger.info("[session] sign-in email=%s user=%s", email, user.id)
        token = create_session_token(str(user.id), user.email, name=user.name, picture=user.image)
        return user, token

    async def get_session_user(self, session_token: str | None) -> SessionUser | None:
        """
        Resolve the request's session to an internal user, or None when unauthenticated.

        A cached id that no longer exists (store reset, user removed) is
        re-resolved by email with a defensive upsert.
        """
        if not session_token:
            return None
        try:
            payload = decode_session_token(session_token)
        except jwt.PyJWTError:
            return None

        cached_id = payload.get("sub")
        if cached_id:
            user = await self.store.get_user(cached_id)
            if user is not None:
                return SessionUser(id=str(user.id), email=user.email)

        email = payload.get("email")
        if not email:
            return None
        user = await self.store.upsert_user(email, name=payload.get("name"), image=payload.get("picture"))
        return SessionUser(id=str(user.id), email=user.email)

    async def require_session(self, session_token: str | None) -> SessionUser:
        user = await self.get_session_user(session_token)
        if user is None:
            raise AuthenticationRequired()
        return user
