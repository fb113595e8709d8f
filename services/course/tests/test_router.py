from uuid import uuid4

import pytest

API = "/api/v1"


async def _create_published_course(client, headers, *, price: str = "0", contents=()) -> dict:
    resp = await client.post(
        f"{API}/courses", json={"title": "FastAPI in Depth", "price": price}, headers=headers
    )
    assert resp.status_code == 201
    course = resp.json()["data"]
    for body in contents:
        added = await client.post(
            f"{API}/courses/{course['course_id']}/contents", json=body, headers=headers
        )
        assert added.status_code == 201, added.text
    published = await client.put(f"{API}/courses/{course['course_id']}/publish", headers=headers)
    assert published.status_code == 200
    return published.json()["data"]


_CONTENTS = (
    {"title": "Welcome", "content_type": "video", "data": {"url": "https://v/1.mp4"}, "is_preview": True},
    {"title": "Reading", "content_type": "text", "data": {"content": "Chapter 1"}},
    {
        "title": "Quiz",
        "content_type": "mcq",
        "data": {"question": "2 + 2?", "options": ["3", "4"], "correct_answer": 1},
    },
)


# ---------------------------------------------------------------------------
# Envelope and auth
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_health(async_client) -> None:
    resp = await async_client.get("/health")
    assert resp.status_code == 200
    assert resp.json() == {"status": "ok", "service": "course"}


@pytest.mark.asyncio
async def test_success_envelope(async_client, auth_headers, author_id) -> None:
    resp = await async_client.post(
        f"{API}/courses", json={"title": "Rust for Pythonistas"}, headers=auth_headers(author_id)
    )
    body = resp.json()
    assert resp.status_code == 201
    assert body["status"] is True
    assert body["message"]
    assert body["data"]["currency"] == "USD"
    assert body["data"]["level"] == "beginner"
    assert body["data"]["is_published"] is False


@pytest.mark.asyncio
async def test_missing_token_is_401(async_client) -> None:
    resp = await async_client.post(f"{API}/courses", json={"title": "No auth"})
    assert resp.status_code == 401
    body = resp.json()
    assert body["status"] is False
    assert "request_id" in body


@pytest.mark.asyncio
async def test_invalid_token_is_401(async_client) -> None:
    resp = await async_client.get(
        f"{API}/enrolled-courses", headers={"Authorization": "Bearer not-a-jwt"}
    )
    assert resp.status_code == 401


@pytest.mark.asyncio
async def test_request_id_is_echoed(async_client) -> None:
    resp = await async_client.get(f"{API}/courses/{uuid4()}", headers={"X-Request-ID": "req-123"})
    assert resp.status_code == 404
    assert resp.headers["X-Request-ID"] == "req-123"
    assert resp.json()["request_id"] == "req-123"


@pytest.mark.asyncio
async def test_validation_error_is_400_with_fields(async_client, auth_headers, author_id) -> None:
    resp = await async_client.post(
        f"{API}/courses", json={"title": "", "price": -5}, headers=auth_headers(author_id)
    )
    assert resp.status_code == 400
    body = resp.json()
    assert body["status"] is False
    fields = {e["field"] for e in body["errors"]}
    assert {"title", "price"} <= fields


# ---------------------------------------------------------------------------
# Catalog
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_invalid_content_payload_is_400(async_client, auth_headers, author_id) -> None:
    headers = auth_headers(author_id)
    course = (await async_client.post(f"{API}/courses", json={"title": "Quiz"}, headers=headers)).json()["data"]
    resp = await async_client.post(
        f"{API}/courses/{course['course_id']}/contents",
        json={"title": "Bad MCQ", "content_type": "mcq", "data": {"question": "Q?", "options": ["a"], "correct_answer": 0}},
        headers=headers,
    )
    assert resp.status_code == 400
    assert any(e["field"].startswith("data.options") for e in resp.json()["errors"])


@pytest.mark.asyncio
async def test_non_author_cannot_modify_course(
    async_client, auth_headers, author_id, learner_id
) -> None:
    course = await _create_published_course(async_client, auth_headers(author_id))
    resp = await async_client.put(
        f"{API}/courses/{course['course_id']}",
        json={"title": "Mine now"},
        headers=auth_headers(learner_id),
    )
    assert resp.status_code == 403


@pytest.mark.asyncio
async def test_course_detail_preview_filtering(
    async_client, auth_headers, author_id, learner_id
) -> None:
    course = await _create_published_course(async_client, auth_headers(author_id), contents=_CONTENTS)
    url = f"{API}/courses/{course['course_id']}"

    anonymous = (await async_client.get(url)).json()["data"]
    assert [c["title"] for c in anonymous["contents"]] == ["Welcome"]
    assert anonymous["total_contents"] == 3

    await async_client.post(f"{url}/enroll", headers=auth_headers(learner_id))
    enrolled = (await async_client.get(url, headers=auth_headers(learner_id))).json()["data"]
    assert enrolled["is_enrolled"] is True
    assert [c["title"] for c in enrolled["contents"]] == ["Welcome", "Reading", "Quiz"]


@pytest.mark.asyncio
async def test_catalog_lists_published_only(async_client, auth_headers, author_id) -> None:
    headers = auth_headers(author_id)
    await _create_published_course(async_client, headers)
    await async_client.post(f"{API}/courses", json={"title": "Draft"}, headers=headers)

    body = (await async_client.get(f"{API}/courses", params={"page": 1, "limit": 10})).json()["data"]
    assert body["pagination"]["total"] == 1
    assert body["items"][0]["title"] == "FastAPI in Depth"


@pytest.mark.asyncio
async def test_catalog_sort_and_order(async_client, auth_headers, author_id) -> None:
    headers = auth_headers(author_id)
    for title, price in (("Mid", "20"), ("Cheap", "5"), ("Pricey", "90")):
        created = await async_client.post(
            f"{API}/courses", json={"title": title, "price": price}, headers=headers
        )
        await async_client.put(f"{API}/courses/{created.json()['data']['course_id']}/publish", headers=headers)

    body = (
        await async_client.get(f"{API}/courses", params={"sort": "price", "order": "asc"})
    ).json()["data"]
    assert [c["title"] for c in body["items"]] == ["Cheap", "Mid", "Pricey"]

    bad = await async_client.get(f"{API}/courses", params={"sort": "author_id"})
    assert bad.status_code == 400


@pytest.mark.asyncio
async def test_update_course_clears_nullable_fields(async_client, auth_headers, author_id) -> None:
    headers = auth_headers(author_id)
    created = await async_client.post(
        f"{API}/courses",
        json={"title": "Ceramics", "description": "Wheel throwing", "category": "art"},
        headers=headers,
    )
    url = f"{API}/courses/{created.json()['data']['course_id']}"

    resp = await async_client.put(
        url, json={"description": None, "category": None, "title": None}, headers=headers
    )
    assert resp.status_code == 200
    data = resp.json()["data"]
    assert data["description"] is None
    assert data["category"] is None
    assert data["title"] == "Ceramics"


# ---------------------------------------------------------------------------
# Enrollment lifecycle
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_enroll_conflict_and_unknown_course(
    async_client, auth_headers, author_id, learner_id
) -> None:
    course = await _create_published_course(async_client, auth_headers(author_id))
    url = f"{API}/courses/{course['course_id']}/enroll"

    first = await async_client.post(url, headers=auth_headers(learner_id))
    assert first.status_code == 201
    assert first.json()["data"]["payment_status"] == "completed"

    again = await async_client.post(url, headers=auth_headers(learner_id))
    assert again.status_code == 409

    missing = await async_client.post(f"{API}/courses/{uuid4()}/enroll", headers=auth_headers(learner_id))
    assert missing.status_code == 404


@pytest.mark.asyncio
async def test_enrolled_routes_require_enrollment(
    async_client, auth_headers, author_id, learner_id
) -> None:
    course = await _create_published_course(async_client, auth_headers(author_id), contents=_CONTENTS)
    resp = await async_client.get(
        f"{API}/enrolled-courses/{course['course_id']}/progress", headers=auth_headers(learner_id)
    )
    assert resp.status_code == 403
    assert resp.json()["status"] is False


@pytest.mark.asyncio
async def test_unenroll(async_client, auth_headers, author_id, learner_id) -> None:
    course = await _create_published_course(async_client, auth_headers(author_id))
    url = f"{API}/courses/{course['course_id']}/enroll"
    await async_client.post(url, headers=auth_headers(learner_id))

    resp = await async_client.delete(url, headers=auth_headers(learner_id))
    assert resp.status_code == 200
    assert (await async_client.delete(url, headers=auth_headers(learner_id))).status_code == 403


# ---------------------------------------------------------------------------
# Learning flow
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_full_learning_flow(async_client, auth_headers, author_id, learner_id) -> None:
    course = await _create_published_course(async_client, auth_headers(author_id), contents=_CONTENTS)
    course_id = course["course_id"]
    headers = auth_headers(learner_id)
    await async_client.post(f"{API}/courses/{course_id}/enroll", headers=headers)
    base = f"{API}/enrolled-courses/{course_id}"

    resume = await async_client.get(f"{base}/resume", headers=headers)
    assert resume.status_code == 404
    assert resume.json()["message"] == "No progress found"

    contents = (await async_client.get(f"{base}/contents", headers=headers)).json()["data"]
    assert [c["is_completed"] for c in contents] == [False, False, False]

    for item in contents:
        nxt = (await async_client.get(f"{base}/next-content", headers=headers)).json()["data"]
        assert nxt["content_id"] == item["content_id"]
        resp = await async_client.put(
            f"{base}/contents/{item['content_id']}/progress",
            json={"is_completed": True, "time_spent": 60, "last_position": 7},
            headers=headers,
        )
        assert resp.status_code == 200

    assert resp.json()["data"]["course_progress"] == 100
    done = await async_client.get(f"{base}/next-content", headers=headers)
    assert done.status_code == 404
    assert done.json()["message"] == "No more content to complete"

    resume = (await async_client.get(f"{base}/resume", headers=headers)).json()["data"]
    assert resume["last_position"] == 7

    progress = (await async_client.get(f"{base}/progress", headers=headers)).json()["data"]
    assert progress["progress"] == 100
    assert progress["is_completed"] is False
    assert progress["total_time_spent"] == 180

    completed = await async_client.post(f"{base}/complete", headers=headers)
    assert completed.status_code == 200
    code = completed.json()["data"]["certificate_code"]
    assert code.startswith("CERT-")

    again = await async_client.post(f"{base}/complete", headers=headers)
    assert again.status_code == 400

    public = await async_client.get(f"{API}/certificates/{code}")
    assert public.status_code == 200
    assert public.json()["data"]["course_id"] == course_id

    mine = (await async_client.get(f"{API}/certificates", headers=headers)).json()["data"]
    assert [c["certificate_code"] for c in mine] == [code]


@pytest.mark.asyncio
async def test_progress_for_unknown_content_is_404(
    async_client, auth_headers, author_id, learner_id
) -> None:
    course = await _create_published_course(async_client, auth_headers(author_id), contents=_CONTENTS)
    headers = auth_headers(learner_id)
    await async_client.post(f"{API}/courses/{course['course_id']}/enroll", headers=headers)
    resp = await async_client.put(
        f"{API}/enrolled-courses/{course['course_id']}/contents/{uuid4()}/progress",
        json={"is_completed": True},
        headers=headers,
    )
    assert resp.status_code == 404


@pytest.mark.asyncio
async def test_progress_recomputed_when_author_deletes_content(
    async_client, auth_headers, author_id, learner_id
) -> None:
    author = auth_headers(author_id)
    course = await _create_published_course(async_client, author, contents=_CONTENTS[:2])
    course_id = course["course_id"]
    headers = auth_headers(learner_id)
    await async_client.post(f"{API}/courses/{course_id}/enroll", headers=headers)
    base = f"{API}/enrolled-courses/{course_id}"

    first, second = (await async_client.get(f"{base}/contents", headers=headers)).json()["data"]
    done = await async_client.put(
        f"{base}/contents/{first['content_id']}/progress", json={"is_completed": True}, headers=headers
    )
    assert done.json()["data"]["course_progress"] == 50

    deleted = await async_client.delete(
        f"{API}/courses/{course_id}/contents/{second['content_id']}", headers=author
    )
    assert deleted.status_code == 200

    progress = (await async_client.get(f"{base}/progress", headers=headers)).json()["data"]
    assert progress["total_contents"] == 1
    assert progress["completed_contents"] == 1
    assert progress["progress"] == 100


@pytest.mark.asyncio
async def test_collection_routes_not_shadowed_by_course_id(
    async_client, auth_headers, author_id, learner_id
) -> None:
    course = await _create_published_course(async_client, auth_headers(author_id), contents=_CONTENTS)
    headers = auth_headers(learner_id)
    await async_client.post(f"{API}/courses/{course['course_id']}/enroll", headers=headers)

    for path in ("progress", "activity", "achievements"):
        resp = await async_client.get(f"{API}/enrolled-courses/{path}", headers=headers)
        assert resp.status_code == 200, path

    listing = (await async_client.get(f"{API}/enrolled-courses", headers=headers)).json()["data"]
    assert listing[0]["course"]["course_id"] == course["course_id"]


# ---------------------------------------------------------------------------
# Reviews
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_review_gated_on_completion(async_client, auth_headers, author_id, learner_id) -> None:
    course = await _create_published_course(async_client, auth_headers(author_id))
    headers = auth_headers(learner_id)
    course_id = course["course_id"]
    await async_client.post(f"{API}/courses/{course_id}/enroll", headers=headers)

    early = await async_client.post(
        f"{API}/courses/{course_id}/reviews", json={"rating": 5}, headers=headers
    )
    assert early.status_code == 403

    await async_client.post(f"{API}/enrolled-courses/{course_id}/complete", headers=headers)
    review = await async_client.post(
        f"{API}/courses/{course_id}/reviews", json={"rating": 5, "comment": "Great"}, headers=headers
    )
    assert review.status_code == 201

    dup = await async_client.post(
        f"{API}/courses/{course_id}/reviews", json={"rating": 4}, headers=headers
    )
    assert dup.status_code == 409

    listing = (await async_client.get(f"{API}/courses/{course_id}/reviews")).json()["data"]
    assert listing["total"] == 1
    assert listing["average_rating"] == 5.0

    review_id = review.json()["data"]["review_id"]
    foreign = await async_client.delete(f"{API}/reviews/{review_id}", headers=auth_headers(author_id))
    assert foreign.status_code == 403


@pytest.mark.asyncio
async def test_review_rating_out_of_range_is_400(async_client, auth_headers, author_id, learner_id) -> None:
    course = await _create_published_course(async_client, auth_headers(author_id))
    resp = await async_client.post(
        f"{API}/courses/{course['course_id']}/reviews", json={"rating": 6}, headers=auth_headers(learner_id)
    )
    assert resp.status_code == 400
