# blade/schemas/auth.py
"""
Pydantic schemas for sign-in and account endpoints.
"""
from typing import Optional

from pydantic import BaseModel

class SignInRequest(BaseModel):
    """
    Request model for the sign-in callback.
    The assertion is an HS256 JWT issued by the identity provider.
    """
    assertion: str  # Signed identity: email (required), name, picture

class RoleUpdateIn(BaseModel):
    """Set the optional profile role. None or "" clears it."""
    role: Optional[str] = None
