import pytest

from blade.config import settings
from blade.core.bootstrap import ensure_seed_space, ensure_space_has_content_types
from blade.core.session import Identity, SessionResolver
from blade.models.content import Component, ContentType, Entry
from blade.models.space import Space
from blade.models.user import User


pytestmark = pytest.mark.asyncio


@pytest.fixture
def content_space(create_user, create_space):
    """Owner + editor + viewer on one space that has its default content types."""

    async def _make():
        owner, editor, viewer = await create_user(), await create_user(), await create_user()
        space = await create_space(owner, identifier="site", members=[(editor, "editor"), (viewer, "viewer")])
        await ensure_space_has_content_types(space)
        return space, owner, editor, viewer

    return _make


async def test_entry_lifecycle(client, content_space, session_headers):
    space, owner, _, _ = await content_space()
    headers = session_headers(owner)

    created = await client.post(
        "/api/v1/entries",
        json={"slug": "about", "name": "About", "content": '{"title": "About us"}'},
        headers=headers,
    )
    assert created.status_code == 200, created.text
    entry = created.json()["data"]
    assert entry["spaceId"] == str(space.id)
    assert entry["contentType"]["type"] == "page"
    assert entry["content"] == {"title": "About us"}
    assert entry["isPublished"] is False

    fetched = await client.get("/api/v1/entries/about", headers=headers)
    assert fetched.json()["data"]["id"] == entry["id"]

    published = await client.put(
        "/api/v1/entries/about", json={"isPublished": True, "slug": "about-us"}, headers=headers
    )
    data = published.json()["data"]
    assert data["slug"] == "about-us"
    assert data["isPublished"] is True
    assert data["publishedAt"] is not None
    assert data["name"] == "About"

    unpublished = await client.put("/api/v1/entries/about-us", json={"isPublished": False}, headers=headers)
    assert unpublished.json()["data"]["publishedAt"] is None

    deleted = await client.delete("/api/v1/entries/about-us", headers=headers)
    assert deleted.status_code == 200
    missing = await client.get("/api/v1/entries/about-us", headers=headers)
    assert missing.status_code == 404
    assert missing.json()["detail"]["code"] == "ENTRY_NOT_FOUND"


async def test_entry_defaults_and_bad_json(client, content_space, session_headers):
    _, owner, _, _ = await content_space()
    headers = session_headers(owner)

    resp = await client.post("/api/v1/entries", json={}, headers=headers)
    data = resp.json()["data"]
    assert data["slug"] == "untitled"
    assert data["name"] == "Untitled"
    assert data["content"] == {}

    bad = await client.post("/api/v1/entries", json={"slug": "x", "content": "{not json"}, headers=headers)
    assert bad.status_code == 400


async def test_entry_slug_conflicts(client, content_space, session_headers):
    _, owner, _, _ = await content_space()
    headers = session_headers(owner)
    for slug in ("one", "two"):
        assert (await client.post("/api/v1/entries", json={"slug": slug}, headers=headers)).status_code == 200

    dup = await client.post("/api/v1/entries", json={"slug": "one"}, headers=headers)
    assert dup.status_code == 409
    assert dup.json()["detail"]["code"] == "ENTRY_EXISTS"

    rename = await client.put("/api/v1/entries/two", json={"slug": "one"}, headers=headers)
    assert rename.status_code == 409


async def test_unknown_content_type(client, content_space, session_headers):
    _, owner, _, _ = await content_space()
    resp = await client.post(
        "/api/v1/entries",
        json={"slug": "x", "contentTypeId": "11111111-0000-4000-8000-000000000000"},
        headers=session_headers(owner),
    )
    assert resp.status_code == 400
    assert resp.json()["detail"]["code"] == "CONTENT_TYPE_NOT_FOUND"


async def test_published_filter(client, content_space, session_headers):
    space, owner, _, _ = await content_space()
    headers = session_headers(owner)
    await client.post("/api/v1/entries", json={"slug": "draft"}, headers=headers)
    await client.post("/api/v1/entries", json={"slug": "live"}, headers=headers)
    await client.put("/api/v1/entries/live", json={"isPublished": True}, headers=headers)

    everything = await client.get("/api/v1/entries", params={"space": str(space.id)}, headers=headers)
    assert {e["slug"] for e in everything.json()["data"]} == {"draft", "live"}

    live = await client.get("/api/v1/entries", params={"published": "true"}, headers=headers)
    assert [e["slug"] for e in live.json()["data"]] == ["live"]


async def test_reorder_entries(client, content_space, session_headers):
    space, owner, _, _ = await content_space()
    headers = session_headers(owner)
    ids = {}
    for slug in ("a", "b", "c"):
        ids[slug] = (await client.post("/api/v1/entries", json={"slug": slug}, headers=headers)).json()["data"]["id"]

    resp = await client.post(
        "/api/v1/entries/reorder", json={"entryIds": [ids["c"], ids["a"], ids["b"]]}, headers=headers
    )
    assert resp.status_code == 200

    listing = await client.get("/api/v1/entries", headers=headers)
    assert [e["slug"] for e in listing.json()["data"]] == ["c", "a", "b"]
    assert [e["position"] for e in listing.json()["data"]] == [0, 1, 2]

    empty = await client.post("/api/v1/entries/reorder", json={"entryIds": []}, headers=headers)
    assert empty.status_code == 400


async def test_reorder_rejects_foreign_entry(client, content_space, create_space, session_headers):
    space, owner, _, _ = await content_space()
    other = await create_space(owner, identifier="other")
    page = await ensure_space_has_content_types(other)
    foreign = await Entry.create(space=other, content_type=page, slug="x", name="X", content={})
    page_type = await ContentType.get(space=space, type="page")
    mine = await Entry.create(space=space, content_type=page_type, slug="y", name="Y", content={}, position=7)

    resp = await client.post(
        "/api/v1/entries/reorder",
        json={"entryIds": [str(mine.id), str(foreign.id)], "spaceId": str(space.id)},
        headers=session_headers(owner),
    )
    assert resp.status_code == 400
    assert (await Entry.get(id=mine.id)).position == 7


async def test_viewer_reads_but_cannot_write(client, content_space, session_headers):
    space, owner, editor, viewer = await content_space()
    await client.post("/api/v1/entries", json={"slug": "home"}, headers=session_headers(owner))
    params = {"space": str(space.id)}

    assert (await client.get("/api/v1/entries", params=params, headers=session_headers(viewer))).status_code == 200
    assert (await client.get("/api/v1/components", params=params, headers=session_headers(viewer))).status_code == 200

    body = {"slug": "new", "spaceId": str(space.id)}
    denied = await client.post("/api/v1/entries", json=body, headers=session_headers(viewer))
    assert denied.status_code == 403
    update = await client.put(
        "/api/v1/entries/home", json={"name": "x", "spaceId": str(space.id)}, headers=session_headers(viewer)
    )
    assert update.status_code == 403

    allowed = await client.post("/api/v1/entries", json=body, headers=session_headers(editor))
    assert allowed.status_code == 200


async def test_components_and_content_types(client, content_space, session_headers):
    space, owner, _, viewer = await content_space()
    headers = session_headers(owner)

    listing = await client.get("/api/v1/components", headers=headers)
    assert [c["type"] for c in listing.json()["data"]] == ["hero", "image", "text"]

    created = await client.post(
        "/api/v1/components",
        json={"name": "Quote", "type": "quote", "schema": {"fields": [{"name": "text"}]}, "isRoot": True},
        headers=headers,
    )
    assert created.status_code == 200, created.text
    comp = created.json()["data"]
    assert comp["schema"] == {"fields": [{"name": "text"}]}
    assert comp["isRoot"] is True and comp["isNestable"] is True

    dup = await client.post("/api/v1/components", json={"name": "Again", "type": "quote"}, headers=headers)
    assert dup.status_code == 409
    assert dup.json()["detail"]["code"] == "COMPONENT_EXISTS"

    denied = await client.delete(f"/api/v1/components/{comp['id']}", headers=session_headers(viewer))
    assert denied.status_code == 403
    removed = await client.delete(f"/api/v1/components/{comp['id']}", headers=headers)
    assert removed.status_code == 200
    assert not await Component.filter(id=comp["id"]).exists()

    gone = await client.delete(f"/api/v1/components/{comp['id']}", headers=headers)
    assert gone.status_code == 404

    types = await client.get("/api/v1/content-types", params={"space": str(space.id)}, headers=headers)
    assert types.json()["data"] == [{"id": types.json()["data"][0]["id"], "name": "Page", "type": "page"}]


async def test_seed_space_is_idempotent(store, monkeypatch):
    monkeypatch.setattr(settings, "seed_on_startup", True)
    first = await ensure_seed_space(store)
    second = await ensure_seed_space(store)

    assert first.id == second.id
    assert first.identifier == "default"
    assert await Space.filter(identifier="default").count() == 1
    home = await Entry.get(space_id=first.id, slug="home")
    assert home.is_published is True
    assert await Component.filter(space_id=first.id).count() == 3


async def test_seed_space_disabled(store, monkeypatch):
    monkeypatch.setattr(settings, "seed_on_startup", False)
    assert await ensure_seed_space(store) is None
    assert not await Space.all().exists()


async def test_seed_owner_matches_sign_in_email(store, monkeypatch):
    monkeypatch.setattr(settings, "seed_on_startup", True)
    monkeypatch.setattr(settings, "seed_user_email", " Seed.Owner@Example.COM ")
    space = await ensure_seed_space(store)

    user, _ = await SessionResolver(store).sign_in(Identity(email="seed.owner@example.com"))
    assert str(space.owner_id) == str(user.id)
    assert await User.filter(email="seed.owner@example.com").count() == 1
