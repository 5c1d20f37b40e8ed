"""
System smoke test: full API flow in-process with SQLite.
Verifies health, auth header, listings, answers, quiz submission,
drafts, reading position and learner endpoints.
"""

import uuid
from typing import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from secaware.database import get_db
from secaware.main import app


@pytest_asyncio.fixture
async def client(session_maker, curriculum):
    """Async client wired to the per-test database."""

    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        async with session_maker() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise
            finally:
                await session.close()

    app.dependency_overrides[get_db] = override_get_db
    try:
        async with AsyncClient(
            transport=ASGITransport(app=app),
            base_url="http://test",
        ) as ac:
            yield ac
    finally:
        app.dependency_overrides.pop(get_db, None)


@pytest.fixture
def headers(learner) -> dict:
    return {"X-User-ID": str(learner.id)}


@pytest.mark.asyncio
async def test_health(client):
    r = await client.get("/health")
    assert r.status_code == 200
    assert r.json()["status"] == "ok"
    assert "X-Request-ID" in r.headers


@pytest.mark.asyncio
async def test_requires_learner_header(client):
    r = await client.get("/api/v1/modules")
    assert r.status_code == 401

    r = await client.get("/api/v1/modules", headers={"X-User-ID": "not-a-uuid"})
    assert r.status_code == 401

    r = await client.get("/api/v1/modules", headers={"X-User-ID": str(uuid.uuid4())})
    assert r.status_code == 401


@pytest.mark.asyncio
async def test_learning_and_quiz_flow(client, headers, curriculum):
    module_id = str(curriculum["modules"][0].id)
    phishing = str(curriculum["phishing"].id)
    passwords = str(curriculum["passwords"].id)

    r = await client.get("/api/v1/modules", headers=headers)
    assert r.status_code == 200
    modules = r.json()
    assert [m["available"] for m in modules] == [True, False]

    r = await client.get(f"/api/v1/sections/{passwords}/availability", headers=headers)
    assert r.json()["available"] is False

    r = await client.put(
        f"/api/v1/sections/{phishing}/reading-position",
        json={"step_index": 1},
        headers=headers,
    )
    assert r.status_code == 200
    r = await client.get(f"/api/v1/sections/{phishing}/reading-position", headers=headers)
    assert r.json()["step_index"] == 1

    r = await client.post(f"/api/v1/sections/{phishing}/learn", headers=headers)
    assert r.status_code == 200
    assert r.json()["completion_percentage"] == 100

    r = await client.put(
        f"/api/v1/sections/{phishing}/quiz-draft",
        json={"current_question_index": 1, "draft_answers": {"0": "right"}},
        headers=headers,
    )
    assert r.status_code == 200
    assert r.json()["draft_answers"] == {"0": "right"}

    r = await client.post(
        f"/api/v1/sections/{phishing}/quiz",
        json={"answers": {"0": "right", "1": "right"}},
        headers=headers,
    )
    assert r.status_code == 200
    body = r.json()
    assert body["xp_earned"] == 75
    assert body["section_completed"] is True

    r = await client.get(f"/api/v1/sections/{phishing}/quiz-draft", headers=headers)
    assert r.status_code == 200
    assert r.json() is None

    r = await client.get(f"/api/v1/modules/{module_id}/sections", headers=headers)
    sections = {s["name"]: s for s in r.json()}
    assert sections["phishing"]["completed"] is True
    assert sections["passwords"]["available"] is True

    r = await client.get("/api/v1/user/xp", headers=headers)
    assert r.json() == {"user_id": headers["X-User-ID"], "total_xp": 75, "level": 1}


@pytest.mark.asyncio
async def test_single_answer_flow(client, headers, curriculum):
    passwords = str(curriculum["passwords"].id)

    r = await client.get(f"/api/v1/sections/{passwords}/next-question", headers=headers)
    assert r.status_code == 200
    question = r.json()
    assert "correct_answer" not in question

    answer_url = f"/api/v1/questions/{question['id']}/answer"
    r = await client.post(answer_url, json={"selected_index": 1}, headers=headers)
    assert r.status_code == 200
    assert r.json()["xp_awarded"] == 10

    r = await client.post(answer_url, json={"selected_index": 0}, headers=headers)
    body = r.json()
    assert body["is_correct"] is True
    assert body["already_awarded"] is True
    assert body["total_xp"] == 10

    r = await client.post(answer_url, json={"selected_index": 5}, headers=headers)
    assert r.status_code == 400
    assert r.json()["code"] == "InvalidInput"

    r = await client.post(answer_url, json={}, headers=headers)
    assert r.status_code == 400

    r = await client.get(f"/api/v1/sections/{passwords}/question-progress", headers=headers)
    assert r.json() == {"total_questions": 4, "correct_answers": 1, "percentage": 25}


@pytest.mark.asyncio
async def test_not_found_and_validation(client, headers):
    missing = str(uuid.uuid4())

    r = await client.post(f"/api/v1/questions/{missing}/answer", json={"selected_index": 0}, headers=headers)
    assert r.status_code == 404
    assert r.json()["retryable"] is False

    r = await client.post(f"/api/v1/learning-content/{missing}/complete", headers=headers)
    assert r.status_code == 404

    r = await client.post(f"/api/v1/sections/{missing}/quiz", json={"answers": {}}, headers=headers)
    assert r.status_code == 422


@pytest.mark.asyncio
async def test_learner_endpoints(client, headers):
    r = await client.get("/api/v1/user/stats", headers=headers)
    assert r.status_code == 200
    assert r.json()["level"] == 1

    r = await client.get("/api/v1/user/achievements", headers=headers)
    assert len(r.json()) == 5

    r = await client.get("/api/v1/user/leaderboard", headers=headers)
    assert r.status_code == 200
    assert r.json()[0]["user_id"] == headers["X-User-ID"]
