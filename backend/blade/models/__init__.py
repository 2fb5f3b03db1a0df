# blade/models/__init__.py
"""
Database models module initialization.
Exports all Tortoise ORM models for convenient imports.

Models exported:
- User: Account created from an external sign-in
- Space, SpaceMember, SpaceFavorite: Tenants and who can see them
- AccessToken: Hashed read-only bearer credential
- Component, ContentType, Entry: Space content
"""
from .user import User
from .space import Space, SpaceMember, SpaceFavorite
from .access_token import AccessToken
from .content import Component, ContentType, Entry
