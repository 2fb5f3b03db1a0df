# blade/schemas/space.py
"""
Pydantic schemas for space, membership and access token endpoints.
"""
from typing import Optional

from pydantic import BaseModel

class SpaceCreateIn(BaseModel):
    """Identifier is normalized server-side (lowercase, hyphens, [a-z0-9-_])."""
    name: str
    identifier: str

class SpaceUpdateIn(BaseModel):
    """All fields optional - only provided fields are updated."""
    name: Optional[str] = None
    identifier: Optional[str] = None

class MemberAddIn(BaseModel):
    """
    Invite an existing user by email.
    role: "editor" (default) or "viewer"; anything else falls back to "editor".
    """
    email: str
    role: Optional[str] = None

class TokenCreateIn(BaseModel):
    """spaceId omitted or empty creates an unscoped token."""
    name: Optional[str] = None
    spaceId: Optional[str] = None
