import os
import uuid

import jwt
import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from tortoise import Tortoise, connections

from blade.config import settings
from blade.core import db as db_module
from blade.core.security import JWT_ALG, create_session_token
from blade.core.store import CredentialStore
from blade.core.tokens import flush_usage_writes
from blade.main import app
from blade.models.space import Space, SpaceMember
from blade.models.user import User


TEST_DB_URL = "sqlite://:memory:?cache=shared"
os.environ["DATABASE_URL"] = TEST_DB_URL
db_module.DB_URL = TEST_DB_URL
db_module.TORTOISE_ORM["connections"]["default"] = TEST_DB_URL


async def _init_test_db() -> None:
    """
    Initialize a clean in-memory SQLite database for every test.
    Ensures tables are recreated from scratch.
    """
    if Tortoise._inited:
        await Tortoise.close_connections()
    await Tortoise.init(config=db_module.TORTOISE_ORM)
    await Tortoise.generate_schemas()


@pytest_asyncio.fixture
async def db():
    """Fresh database; waits for background usage writes before closing."""
    await _init_test_db()
    yield
    await flush_usage_writes()
    await Tortoise.close_connections()


@pytest_asyncio.fixture
async def store(db) -> CredentialStore:
    return CredentialStore(connections.get("default"))


@pytest_asyncio.fixture
async def client(db):
    """
    Provide an HTTPX AsyncClient bound to the FastAPI app with a fresh DB.
    Startup hooks (seeding) are not run.
    """
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://testserver") as async_client:
        yield async_client


@pytest_asyncio.fixture
async def create_user(db):
    """
    Factory fixture to create users directly via ORM, as if they had signed in once.
    """

    async def _create_user(email: str | None = None, name: str | None = None) -> User:
        return await User.create(
            email=email or f"{uuid.uuid4().hex[:8]}@example.com",
            name=name or "Test User",
        )

    return _create_user


@pytest_asyncio.fixture
async def create_space(db):
    """Factory fixture for spaces, optionally with members: [(user, role), ...]."""

    async def _create_space(owner: User, identifier: str = "blog", name: str | None = None, members=()) -> Space:
        space = await Space.create(owner=owner, identifier=identifier, name=name or identifier.title())
        for user, role in members:
            await SpaceMember.create(space=space, user=user, role=role)
        return space

    return _create_space


@pytest.fixture
def session_headers():
    """Build X-Session-Token headers for a user without going through sign-in."""

    def _headers(user: User) -> dict[str, str]:
        return {"X-Session-Token": create_session_token(str(user.id), user.email, name=user.name)}

    return _headers


@pytest.fixture
def make_assertion():
    """Sign an identity assertion the way the identity provider would."""

    def _assertion(email: str | None, name: str | None = None, picture: str | None = None, secret: str | None = None) -> str:
        claims = {"name": name, "picture": picture}
        if email is not None:
            claims["email"] = email
        return jwt.encode(claims, secret or settings.idp_shared_secret, algorithm=JWT_ALG)

    return _assertion
