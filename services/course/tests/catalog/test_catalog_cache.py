import json
from collections.abc import AsyncGenerator
from uuid import uuid4

import pytest
import pytest_asyncio
from fakeredis import FakeServer
from fakeredis.aioredis import FakeRedis
from fastapi import FastAPI
from sqlalchemy.ext.asyncio import AsyncSession

from app.catalog import cache
from app.dependencies import get_redis

API = "/api/v1"

_CONTENTS = (
    {"title": "Welcome", "content_type": "video", "data": {"url": "https://v/1.mp4"}, "is_preview": True},
    {"title": "Reading", "content_type": "text", "data": {"content": "Chapter 1"}},
)


@pytest.fixture
def redis_server() -> FakeServer:
    return FakeServer()


@pytest_asyncio.fixture
async def fake_redis(
    course_app: FastAPI, redis_server: FakeServer
) -> AsyncGenerator[FakeRedis, None]:
    client = FakeRedis(server=redis_server, decode_responses=True)
    course_app.dependency_overrides[get_redis] = lambda: client
    yield client
    await client.aclose()


def _outline_key(course_id: str) -> str:
    return f"catalog:course:{course_id}:outline"


async def _published_course(client, headers) -> str:
    created = await client.post(f"{API}/courses", json={"title": "Pottery"}, headers=headers)
    course_id = created.json()["data"]["course_id"]
    for body in _CONTENTS:
        await client.post(f"{API}/courses/{course_id}/contents", json=body, headers=headers)
    await client.put(f"{API}/courses/{course_id}/publish", headers=headers)
    return course_id


# ---------------------------------------------------------------------------
# Cache helpers
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_helpers_are_noops_without_redis() -> None:
    course_id = uuid4()
    assert await cache.get_outline(course_id, None) is None
    await cache.set_outline(course_id, "{}", 60, None)
    await cache.invalidate_outline(course_id, None)


@pytest.mark.asyncio
async def test_set_outline_respects_ttl(fake_redis) -> None:
    course_id = uuid4()
    await cache.set_outline(course_id, '{"x": 1}', 60, fake_redis)
    assert await cache.get_outline(course_id, fake_redis) == '{"x": 1}'
    assert 0 < await fake_redis.ttl(_outline_key(str(course_id))) <= 60

    other = uuid4()
    await cache.set_outline(other, '{"x": 1}', 0, fake_redis)
    assert await cache.get_outline(other, fake_redis) is None


@pytest.mark.asyncio
async def test_helpers_swallow_redis_errors(fake_redis, redis_server) -> None:
    redis_server.connected = False
    course_id = uuid4()
    assert await cache.get_outline(course_id, fake_redis) is None
    await cache.set_outline(course_id, "{}", 60, fake_redis)
    await cache.invalidate_outline(course_id, fake_redis)


# ---------------------------------------------------------------------------
# Course detail
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_anonymous_detail_served_from_cache(
    async_client, fake_redis, auth_headers, author_id, learner_id
) -> None:
    course_id = await _published_course(async_client, auth_headers(author_id))
    url = f"{API}/courses/{course_id}"

    first = await async_client.get(url)
    assert first.status_code == 200
    cached = await fake_redis.get(_outline_key(course_id))
    assert cached is not None

    outline = json.loads(cached)
    outline["course"]["title"] = "Served from cache"
    await fake_redis.set(_outline_key(course_id), json.dumps(outline))

    anonymous = (await async_client.get(url)).json()["data"]
    assert anonymous["course"]["title"] == "Served from cache"
    assert [c["title"] for c in anonymous["contents"]] == ["Welcome"]

    # Signed-in viewers always read the database
    signed_in = (await async_client.get(url, headers=auth_headers(learner_id))).json()["data"]
    assert signed_in["course"]["title"] == "Pottery"


@pytest.mark.asyncio
async def test_author_writes_invalidate_outline(
    async_client, fake_redis, auth_headers, author_id
) -> None:
    headers = auth_headers(author_id)
    course_id = await _published_course(async_client, headers)
    url = f"{API}/courses/{course_id}"
    contents = (await async_client.get(f"{url}/contents", headers=headers)).json()["data"]
    welcome, reading = contents

    writes = (
        ("put", url, {"title": "Pottery II"}),
        ("put", f"{url}/publish", None),
        ("post", f"{url}/contents", {"title": "Glazes", "content_type": "note", "data": {"content": "Matte"}}),
        ("put", f"{url}/contents/{welcome['content_id']}", {"title": "Hello"}),
        ("delete", f"{url}/contents/{reading['content_id']}", None),
    )
    for method, path, body in writes:
        assert (await async_client.get(url)).status_code == 200
        assert await fake_redis.exists(_outline_key(course_id)) == 1

        kwargs = {"headers": headers}
        if body is not None:
            kwargs["json"] = body
        resp = await async_client.request(method.upper(), path, **kwargs)
        assert resp.status_code in (200, 201), (method, path, resp.text)
        assert await fake_redis.exists(_outline_key(course_id)) == 0, (method, path)

    detail = (await async_client.get(url)).json()["data"]
    assert detail["course"]["title"] == "Pottery II"
    assert [c["title"] for c in detail["contents"]] == ["Hello"]
    assert detail["total_contents"] == 2


@pytest.mark.asyncio
async def test_redis_failure_falls_back_to_database(
    async_client, fake_redis, redis_server, auth_headers, author_id
) -> None:
    headers = auth_headers(author_id)
    course_id = await _published_course(async_client, headers)
    redis_server.connected = False

    resp = await async_client.get(f"{API}/courses/{course_id}")
    assert resp.status_code == 200
    assert resp.json()["data"]["course"]["title"] == "Pottery"

    updated = await async_client.put(
        f"{API}/courses/{course_id}", json={"title": "Stoneware"}, headers=headers
    )
    assert updated.status_code == 200

    redis_server.connected = True
    assert await fake_redis.exists(_outline_key(course_id)) == 0
    resp = await async_client.get(f"{API}/courses/{course_id}")
    assert resp.json()["data"]["course"]["title"] == "Stoneware"


@pytest.mark.asyncio
async def test_outline_dropped_after_write_commits(
    async_client, fake_redis, monkeypatch, auth_headers, author_id
) -> None:
    headers = auth_headers(author_id)
    course_id = await _published_course(async_client, headers)
    calls: list[str] = []

    original_commit = AsyncSession.commit
    original_invalidate = cache.invalidate_outline

    async def _commit(self) -> None:
        calls.append("commit")
        await original_commit(self)

    async def _invalidate(course_id, redis) -> None:
        calls.append("invalidate")
        await original_invalidate(course_id, redis)

    monkeypatch.setattr(AsyncSession, "commit", _commit)
    monkeypatch.setattr(cache, "invalidate_outline", _invalidate)

    resp = await async_client.put(
        f"{API}/courses/{course_id}", json={"title": "Raku"}, headers=headers
    )
    assert resp.status_code == 200
    assert "invalidate" in calls
    assert calls.index("commit") < calls.index("invalidate")
