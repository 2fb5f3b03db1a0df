# blade/api/v1/deps.py
from fastapi import Depends, Header, Request
from tortoise import connections

from blade.config import settings
from blade.core.access import ReadAccess, resolve_read_access
from blade.core.policy import SpacePolicy
from blade.core.session import SessionResolver, SessionUser
from blade.core.spaces import SpaceResolver
from blade.core.store import CredentialStore

async def get_store() -> CredentialStore:
    """
    FastAPI dependency providing the credential store bound to the default connection.

    Everything below receives the store from here rather than importing a
    global client, so tests can override this one dependency.
    """
    return CredentialStore(connections.get("default"))

def get_session_token(
    request: Request,
    x_session_token: str | None = Header(default=None),
) -> str | None:
    """
    Extract the session token from either:
    1. X-Session-Token header - preferred method (API clients, tests)
    2. HttpOnly cookie set at sign-in - fallback method (browser)
    """
    if x_session_token and x_session_token.strip():
        return x_session_token.strip()
    return request.cookies.get(settings.session_cookie_name)

async def get_optional_session(
    session_token: str | None = Depends(get_session_token),
    store: CredentialStore = Depends(get_store),
) -> SessionUser | None:
    """The session user, or None when the request is unauthenticated."""
    return await SessionResolver(store).get_session_user(session_token)

async def require_session(
    session_token: str | None = Depends(get_session_token),
    store: CredentialStore = Depends(get_store),
) -> SessionUser:
    """
    FastAPI dependency for every mutating route.

    Raises:
        AuthenticationRequired (401): If there is no valid session.
        Access tokens are never accepted here.
    """
    return await SessionResolver(store).require_session(session_token)

async def require_read_access(
    session_token: str | None = Depends(get_session_token),
    authorization: str | None = Header(default=None),
    x_api_key: str | None = Header(default=None),
    store: CredentialStore = Depends(get_store),
) -> ReadAccess:
    """
    FastAPI dependency for content reads: a session or a valid access token.

    Raises:
        InvalidToken (401): If neither a session nor a valid token is present.
    """
    return await resolve_read_access(store, session_token, authorization, x_api_key)

async def get_policy(store: CredentialStore = Depends(get_store)) -> SpacePolicy:
    return SpacePolicy(store)

async def get_space_resolver(store: CredentialStore = Depends(get_store)) -> SpaceResolver:
    return SpaceResolver(store)
