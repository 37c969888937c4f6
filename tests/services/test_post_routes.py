"""Post Routes: listing, single post, creation with throttle over HTTP.

Tests cover:
    - Logged-in author posts -> {"msg": "ok"}, post appears in the room listing
    - Identical post right away -> {"msg": "ignored"}, still one post
    - No session / empty text -> {"msg": "ignored"}, no row
    - Replies appear under their post
    - A reply through a room the post is not in is ignored
    - Listing JSON shape (author.name, createdAt with Z, replies)
    - Unknown room / post -> 404
"""

from backalley.api.dependencies import RateLimiterRegistry, get_rate_limiters
from backalley.config import load_settings
from backalley.main import app
from backalley.models.room import Room
from tests.services.helpers import cookie_header, login


async def _post(client, token, room, text):
    return await client.post(
        f"/posts/{room}/", json={"text": text}, headers=cookie_header(token),
    )


async def test_post_appears_in_room(client, root_author, room):
    token = await login(client, "root")
    res = await _post(client, token, room, "hello")
    assert res.json() == {"msg": "ok"}

    res = await client.get(f"/posts/{room}/")
    assert res.status_code == 200
    posts = res.json()
    assert len(posts) == 1
    assert posts[0]["text"] == "hello"
    assert posts[0]["author"] == {"name": "root"}
    assert posts[0]["room"] == room
    assert posts[0]["createdAt"].endswith("Z")
    assert posts[0]["replies"] == []


async def test_duplicate_post_is_ignored(client, root_author, room):
    token = await login(client, "root")
    assert (await _post(client, token, room, "hello")).json() == {"msg": "ok"}
    assert (await _post(client, token, room, "hello")).json() == {"msg": "ignored"}

    res = await client.get(f"/posts/{room}/")
    assert len(res.json()) == 1


async def test_post_without_session_is_ignored(client, room):
    res = await client.post(f"/posts/{room}/", json={"text": "hello"})
    assert res.status_code == 200
    assert res.json() == {"msg": "ignored"}
    assert (await client.get(f"/posts/{room}/")).json() == []


async def test_blank_post_is_ignored(client, root_author, room):
    token = await login(client, "root")
    assert (await _post(client, token, room, "   ")).json() == {"msg": "ignored"}


async def test_post_to_unknown_room_is_ignored(client, root_author):
    token = await login(client, "root")
    assert (await _post(client, token, "nowhere", "hello")).json() == {"msg": "ignored"}


async def test_overlong_post_is_validation_error(client, root_author, room):
    token = await login(client, "root")
    res = await _post(client, token, room, "x" * 201)
    assert res.status_code == 400


async def test_reply_appears_under_post(client, root_author, room):
    token = await login(client, "root")
    await _post(client, token, room, "hello")
    post_id = (await client.get(f"/posts/{room}/")).json()[0]["id"]

    res = await client.post(
        f"/posts/{room}/{post_id}/", json={"text": "hi back"},
        headers=cookie_header(token),
    )
    assert res.json() == {"msg": "ok"}

    res = await client.get(f"/posts/{room}/{post_id}/")
    assert res.status_code == 200
    replies = res.json()["replies"]
    assert [r["text"] for r in replies] == ["hi back"]
    assert replies[0]["author"] == {"name": "root"}


async def test_duplicate_reply_is_ignored(client, root_author, room):
    token = await login(client, "root")
    await _post(client, token, room, "hello")
    post_id = (await client.get(f"/posts/{room}/")).json()[0]["id"]

    for expected in ("ok", "ignored"):
        res = await client.post(
            f"/posts/{room}/{post_id}/", json={"text": "+1"},
            headers=cookie_header(token),
        )
        assert res.json() == {"msg": expected}


async def test_reply_through_another_room_is_ignored(client, test_db, root_author, room):
    test_db.add(Room(name="other"))
    await test_db.commit()
    token = await login(client, "root")
    await _post(client, token, room, "hello")
    post_id = (await client.get(f"/posts/{room}/")).json()[0]["id"]

    assert (await client.get(f"/posts/other/{post_id}/")).status_code == 404
    res = await client.post(
        f"/posts/other/{post_id}/", json={"text": "sneaky"},
        headers=cookie_header(token),
    )
    assert res.json() == {"msg": "ignored"}
    assert (await client.get(f"/posts/{room}/{post_id}/")).json()["replies"] == []


async def test_unknown_room_is_404(client):
    res = await client.get("/posts/nowhere/")
    assert res.status_code == 404
    assert res.json()["error"]["code"] == "RESOURCE_NOT_FOUND"


async def test_unknown_post_is_404(client, room):
    res = await client.get(f"/posts/{room}/999/")
    assert res.status_code == 404


async def test_post_limiter_throttles_creation(client, root_author, room):
    tight = RateLimiterRegistry(load_settings(
        password_pepper="test-pepper", post_rate_limit=1, _env_file=None,
    ))
    token = await login(client, "root")
    app.dependency_overrides[get_rate_limiters] = lambda: tight

    assert (await _post(client, token, room, "one")).json() == {"msg": "ok"}
    res = await _post(client, token, room, "two")
    assert res.status_code == 429
    assert "retry-after" in res.headers
