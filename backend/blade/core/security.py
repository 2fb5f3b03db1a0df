# blade/core/security.py
"""
Security module for session credentials.
Handles signing/verifying the session token issued after sign-in and
verifying identity assertions handed to us by the external identity provider.
"""
import datetime as dt
import jwt  # PyJWT

from blade.config import settings

JWT_ALG = "HS256"  # JWT signing algorithm (HMAC SHA-256)

def create_session_token(
    user_id: str,
    email: str | None,
    name: str | None = None,
    picture: str | None = None,
) -> str:
    """
    Create a signed session token for an internal user.

    The payload caches the internal user id so most requests can skip the
    email lookup; the email travels along so a stale id can be re-resolved.

    Token payload includes:
        - sub: Internal user id
        - email, name, picture: Identity as asserted at sign-in
        - iat / exp: Issued-at and expiration timestamps
    """
    now = dt.datetime.now(dt.timezone.utc)
    payload = {
        "sub": user_id,
        "email": email,
        "name": name,
        "picture": picture,
        "iat": now,
        "exp": now + dt.timedelta(minutes=settings.session_expire_minutes),
    }
    return jwt.encode(payload, settings.session_secret, algorithm=JWT_ALG)

def decode_session_token(token: str) -> dict:
    """
    Decode and validate a session token.

    Raises:
        jwt.ExpiredSignatureError: If the token has expired
        jwt.InvalidTokenError: If the token is invalid or malformed
    """
    return jwt.decode(token, settings.session_secret, algorithms=[JWT_ALG])

def decode_identity_assertion(assertion: str) -> dict:
    """
    Verify an identity assertion signed by the identity provider.

    The assertion must carry at least an ``email`` claim; ``name`` and
    ``picture`` are optional.

    Raises:
        jwt.InvalidTokenError: If the signature, expiry or claims are invalid
    """
    payload = jwt.decode(assertion, settings.idp_shared_secret, algorithms=[JWT_ALG])
    if not payload.get("email"):
        raise jwt.InvalidTokenError("identity assertion carries no email")
    return payload
