"""Test helpers: fake clock, fake presigner, and session-cookie plumbing for route tests."""

from datetime import datetime, timedelta, timezone
from http.cookies import SimpleCookie

from httpx import AsyncClient

COOKIE_NAME = "auth_session"
PASSWORD = "secret123"


class FakeClock:
    """Injectable clock for SessionPolicy / ContentService."""

    def __init__(self, start: datetime | None = None):
        self.now = start or datetime(2026, 1, 1, 12, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


class FakePresigner:
    """ObjectStoragePresigner that records calls instead of talking to S3."""

    def __init__(self):
        self.calls: list[tuple[str, str, int]] = []

    def presign_put(self, object_key: str, content_type: str, size: int) -> str:
        self.calls.append((object_key, content_type, size))
        return f"https://storage.test/csc/{object_key}?X-Amz-Signature=fake"

    def public_url(self, object_key: str) -> str:
        return f"https://cdn.test/csc/{object_key}"


def set_cookie_attrs(response) -> dict[str, str] | None:
    """Attributes of the session Set-Cookie header (lower-cased keys), or None."""
    for header in response.headers.get_list("set-cookie"):
        jar = SimpleCookie()
        jar.load(header)
        if COOKIE_NAME in jar:
            morsel = jar[COOKIE_NAME]
            attrs = {k: str(v) for k, v in morsel.items() if v}
            attrs["value"] = morsel.value
            return attrs
    return None


def take_session_cookie(client: AsyncClient, response) -> str | None:
    """Session token from the response's Set-Cookie, or None. Clears the client jar."""
    client.cookies.clear()
    attrs = set_cookie_attrs(response)
    if attrs and attrs["value"]:
        return attrs["value"]
    return None


def cookie_header(token: str) -> dict[str, str]:
    return {"Cookie": f"{COOKIE_NAME}={token}"}


async def login(client: AsyncClient, name: str, password: str = PASSWORD) -> str:
    res = await client.post("/author/login", json={"name": name, "password": password})
    assert res.status_code == 200, res.text
    token = take_session_cookie(client, res)
    assert token
    return token
