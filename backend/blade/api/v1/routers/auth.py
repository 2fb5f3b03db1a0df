# blade/api/v1/routers/auth.py
import jwt  # PyJWT
from fastapi import APIRouter, Depends, Response

from blade.api.v1.deps import get_store, require_session
from blade.config import settings
from blade.core.errors import InvalidToken, NotFound
from blade.core.security import decode_identity_assertion
from blade.core.session import Identity, SessionResolver, SessionUser
from blade.core.store import CredentialStore
from blade.models.user import User
from blade.schemas.auth import SignInRequest

router = APIRouter(prefix="/auth", tags=["auth"])

def user_to_dict(u: User) -> dict:
    return {"id": str(u.id), "email": u.email, "name": u.name, "image": u.image, "role": u.role}

@router.post("/signin")
async def sign_in(body: SignInRequest, response: Response, store: CredentialStore = Depends(get_store)):
    """
    Exchange an identity provider assertion for a session.

    Verifies the assertion signature, upserts the user by email (creating it
    on first sight, refreshing name/avatar afterwards) and issues a session
    token. The token is returned in the body and also set as an HttpOnly
    cookie for browser clients.

    Returns:
        dict: success + data with user and sessionToken

    Raises:
        InvalidToken (401): If the assertion is unsigned, expired or has no email
    """
    try:
        claims = decode_identity_assertion(body.assertion)
    except jwt.PyJWTError:
        raise InvalidToken("Invalid identity assertion", code="AUTH_INVALID_ASSERTION")

    identity = Identity(email=claims["email"], name=claims.get("name"), picture=claims.get("picture"))
    user, token = await SessionResolver(store).sign_in(identity)
    response.set_cookie(settings.session_cookie_name, token, httponly=True, secure=False, samesite="lax")
    return {"success": True, "data": {"user": user_to_dict(user), "sessionToken": token}}

@router.get("/me")
async def me(session: SessionUser = Depends(require_session), store: CredentialStore = Depends(get_store)):
    """Current signed-in user. 401 without a session."""
    user = await store.get_user(session.id)
    if user is None:
        raise NotFound("User not found", code="USER_NOT_FOUND")
    return {"success": True, "data": user_to_dict(user)}

@router.post("/logout")
async def logout(response: Response):
    """
    Clear the session cookie. Always succeeds.

    The signed token itself stays valid until it expires.
    """
    response.delete_cookie(settings.session_cookie_name)
    return {"success": True}
