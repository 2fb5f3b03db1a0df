"""
Unit tests for core.session module.
Tests sign-in upsert, session resolution and the stale-id fallback.
"""
import pytest

from blade.core.errors import AuthenticationRequired
from blade.core.security import create_session_token, decode_session_token
from blade.core.session import Identity, SessionResolver
from blade.models.user import User


pytestmark = pytest.mark.asyncio


async def test_first_sign_in_creates_user(store):
    user, token = await SessionResolver(store).sign_in(
        Identity(email="New@Example.com", name="New", picture="https://img/new.png")
    )
    assert user.email == "new@example.com"
    assert user.name == "New"
    assert user.image == "https://img/new.png"
    assert decode_session_token(token)["sub"] == str(user.id)


async def test_repeat_sign_in_refreshes_changed_fields_only(store):
    resolver = SessionResolver(store)
    first, _ = await resolver.sign_in(Identity(email="a@example.com", name="Old", picture="https://img/a.png"))
    second, _ = await resolver.sign_in(Identity(email="a@example.com", name="New Name"))

    assert second.id == first.id
    assert second.name == "New Name"
    assert second.image == "https://img/a.png"
    assert await User.filter(email="a@example.com").count() == 1


async def test_session_user_from_cached_id(store, create_user):
    user = await create_user(email="c@example.com")
    token = create_session_token(str(user.id), user.email)

    session = await SessionResolver(store).get_session_user(token)
    assert session.id == str(user.id)
    assert session.email == "c@example.com"


@pytest.mark.parametrize("token", [None, "", "garbage"])
async def test_no_or_bad_token_is_no_session(store, token):
    assert await SessionResolver(store).get_session_user(token) is None


async def test_stale_cached_id_reresolves_by_email(store, create_user):
    user = await create_user(email="stale@example.com", name="Stale")
    token = create_session_token(str(user.id), user.email, name="Stale")
    await user.delete()

    session = await SessionResolver(store).get_session_user(token)
    assert session is not None
    assert session.email == "stale@example.com"
    assert session.id != str(user.id)
    assert await User.filter(email="stale@example.com").count() == 1


async def test_require_session_raises_without_session(store):
    with pytest.raises(AuthenticationRequired):
        await SessionResolver(store).require_session(None)
