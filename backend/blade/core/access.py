# blade/core/access.py
"""
Read-access resolution for the content API.

A request is a session principal if it carries a valid session, otherwise a
token principal if it carries a valid access token, otherwise it is
rejected. Nothing is remembered between requests.
"""
from dataclasses import dataclass

from blade.core.session import SessionResolver
from blade.core.store import CredentialStore
from blade.core.tokens import TokenCodec, get_token_from_headers


@dataclass(frozen=True)
class ReadAccess:
    # Non-null: the token restricts every read to this space, whatever the caller asks for
    space_id: str | None = None
    # Set for session principals; used to find the default space and check membership
    user_id: str | None = None

    @property
    def is_token(self) -> bool:
        return self.user_id is None


async def resolve_read_access(
    store: CredentialStore,
    session_token: str | None,
    authorization: str | None = None,
    x_api_key: str | None = None,
) -> ReadAccess:
    """
    Resolve who is reading. Session wins over token.

    Raises InvalidToken when there is neither a session nor a valid token.
    """
    user = await SessionResolver(store).get_session_user(session_token)
    if user is not None:
        return ReadAccess(space_id=None, user_id=user.id)

    presented = get_token_from_headers(authorization, x_api_key)
    space_id = await TokenCodec(store).validate_access_token(presented)
    return ReadAccess(space_id=space_id)
