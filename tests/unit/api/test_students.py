"""Tests for the student router through the full application."""

from __future__ import annotations

from unittest.mock import AsyncMock, patch

import fakeredis
import orjson
import pytest
from httpx import AsyncClient

from portal.cache import BackingStoreUnavailableError, RedisCacheService

STUDENTS = "/api/v1/students"


def student_body(student_id: str = "SV001", name: str = "An Nguyen") -> dict:
    return {"studentId": student_id, "fullName": name, "dob": "2001-05-02"}


class TestStudentReads:
    @pytest.mark.asyncio
    async def test_empty_list_is_not_found(self, client: AsyncClient) -> None:
        response = await client.get(STUDENTS)

        assert response.status_code == 404
        [message] = response.json()["messages"]
        assert message["code"] == "NotFound"
        assert message["messageType"] == "Error"

    @pytest.mark.asyncio
    @pytest.mark.usefixtures("invalidate_on_write")
    async def test_list_and_get_by_id(self, client: AsyncClient) -> None:
        await client.post(STUDENTS, json=student_body("SV001"))
        await client.post(STUDENTS, json=student_body("SV002", "Binh Tran"))

        listed = await client.get(STUDENTS)
        single = await client.get(f"{STUDENTS}/SV002")

        assert listed.status_code == 200
        assert [s["studentId"] for s in listed.json()] == ["SV001", "SV002"]
        assert single.json()["fullName"] == "Binh Tran"
        assert single.json()["dob"] == "2001-05-02"

    @pytest.mark.asyncio
    async def test_unknown_id_is_not_found(self, client: AsyncClient) -> None:
        await client.post(STUDENTS, json=student_body())

        response = await client.get(f"{STUDENTS}/SV404")

        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_list_is_served_from_cache(
        self, client: AsyncClient, fake_redis: fakeredis.aioredis.FakeRedis
    ) -> None:
        await client.post(STUDENTS, json=student_body())

        await client.get(STUDENTS)

        cached = orjson.loads(await fake_redis.get("test:StudentData"))
        assert [s["student_id"] for s in cached] == ["SV001"]

    @pytest.mark.asyncio
    async def test_cached_list_stays_stale_until_removed(self, client: AsyncClient) -> None:
        """Creates edit a private copy of the cached list, not the cached entry."""
        assert (await client.get(STUDENTS)).status_code == 404

        assert (await client.post(STUDENTS, json=student_body())).status_code == 201
        assert (await client.get(STUDENTS)).status_code == 404

        await client.delete("/cache/keys", params={"pattern": "StudentData"})
        response = await client.get(STUDENTS)
        assert response.status_code == 200
        assert [s["studentId"] for s in response.json()] == ["SV001"]

    @pytest.mark.asyncio
    async def test_cache_fault_is_internal_error(
        self, client: AsyncClient, cache: RedisCacheService
    ) -> None:
        failing = AsyncMock(side_effect=BackingStoreUnavailableError("Redis GET failed"))

        with patch.object(cache, "get_or_set", failing):
            response = await client.get(STUDENTS)

        assert response.status_code == 500
        [message] = response.json()["messages"]
        assert message["code"] == "InternalServerError"
        assert message["messageType"] == "Exception"
        assert "Redis" not in message["text"]


class TestStudentWrites:
    @pytest.mark.asyncio
    async def test_create(self, client: AsyncClient) -> None:
        response = await client.post(STUDENTS, json=student_body())

        assert response.status_code == 201
        assert response.headers["location"] == f"{STUDENTS}/SV001"
        assert response.json()["studentId"] == "SV001"

    @pytest.mark.asyncio
    async def test_create_existing_is_conflict(self, client: AsyncClient) -> None:
        await client.post(STUDENTS, json=student_body())

        response = await client.post(STUDENTS, json=student_body(name="Someone Else"))

        assert response.status_code == 409
        assert response.json()["messages"][0]["code"] == "Conflict"

    @pytest.mark.asyncio
    async def test_create_rejects_unknown_fields(self, client: AsyncClient) -> None:
        response = await client.post(STUDENTS, json={**student_body(), "grade": "A"})
        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_update(self, client: AsyncClient) -> None:
        await client.post(STUDENTS, json=student_body())

        response = await client.put(f"{STUDENTS}/SV001", json=student_body(name="An Tran"))

        assert response.status_code == 200
        assert response.json()["fullName"] == "An Tran"
        assert (await client.get(f"{STUDENTS}/SV001")).status_code == 200

    @pytest.mark.asyncio
    async def test_update_id_mismatch_is_bad_request(self, client: AsyncClient) -> None:
        response = await client.put(f"{STUDENTS}/SV001", json=student_body("SV002"))
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_update_missing_is_not_found(self, client: AsyncClient) -> None:
        response = await client.put(f"{STUDENTS}/SV404", json=student_body("SV404"))
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_delete(self, client: AsyncClient) -> None:
        await client.post(STUDENTS, json=student_body())

        response = await client.delete(f"{STUDENTS}/SV001")

        assert response.status_code == 204
        assert (await client.delete(f"{STUDENTS}/SV001")).status_code == 404


class TestStudentProgress:
    @pytest.mark.asyncio
    async def test_progress_is_cached_per_student(
        self, client: AsyncClient, fake_redis: fakeredis.aioredis.FakeRedis
    ) -> None:
        await client.post(STUDENTS, json=student_body())
        await client.post("/api/v1/courses", json={"courseId": "PY101", "name": "Python"})
        await client.post(
            "/api/v1/student-progress",
            json={"studentId": "SV001", "courseId": "PY101", "lessonsCompleted": 2},
        )

        response = await client.get(f"{STUDENTS}/SV001/progress")

        assert response.status_code == 200
        assert [p["lessonsCompleted"] for p in response.json()] == [2]
        assert await fake_redis.hexists("test:StudentProgressByStudent", "sv001")

    @pytest.mark.asyncio
    async def test_progress_write_drops_hash_record(
        self, client: AsyncClient, fake_redis: fakeredis.aioredis.FakeRedis
    ) -> None:
        await client.post(STUDENTS, json=student_body())
        await client.post("/api/v1/courses", json={"courseId": "PY101", "name": "Python"})
        await client.get(f"{STUDENTS}/SV001/progress")

        await client.post(
            "/api/v1/student-progress", json={"studentId": "SV001", "courseId": "PY101"}
        )

        assert await fake_redis.exists("test:StudentProgressByStudent") == 0
        response = await client.get(f"{STUDENTS}/SV001/progress")
        assert len(response.json()) == 1

    @pytest.mark.asyncio
    async def test_progress_of_unknown_student(self, client: AsyncClient) -> None:
        response = await client.get(f"{STUDENTS}/SV404/progress")
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_ids_differing_in_case_are_one_student(self, client: AsyncClient) -> None:
        """Per-student cache records use the lower-cased id, so ``sv01`` is ``SV01``."""
        await client.post(STUDENTS, json=student_body("SV01"))
        await client.post("/api/v1/courses", json={"courseId": "C1", "name": "Python"})
        await client.post(
            "/api/v1/student-progress", json={"studentId": "SV01", "courseId": "C1"}
        )

        response = await client.post(STUDENTS, json=student_body("sv01", "Someone Else"))

        assert response.status_code == 409
        assert (await client.get(f"{STUDENTS}/sv01/progress")).status_code == 404
        assert len((await client.get(f"{STUDENTS}/SV01/progress")).json()) == 1

    @pytest.mark.asyncio
    async def test_delete_student_drops_hash_record(
        self, client: AsyncClient, fake_redis: fakeredis.aioredis.FakeRedis
    ) -> None:
        await client.post(STUDENTS, json=student_body())
        await client.get(f"{STUDENTS}/SV001/progress")
        assert await fake_redis.hexists("test:StudentProgressByStudent", "sv001")

        assert (await client.delete(f"{STUDENTS}/SV001")).status_code == 204

        assert await fake_redis.exists("test:StudentProgressByStudent") == 0


class TestStudentQueries:
    @pytest.mark.asyncio
    async def test_search_by_name(self, client: AsyncClient) -> None:
        await client.post(STUDENTS, json=student_body("SV001", "An Nguyen"))
        await client.post(STUDENTS, json=student_body("SV002", "Binh Tran"))

        response = await client.get(f"{STUDENTS}/search", params={"name": "TRAN"})

        assert response.status_code == 200
        assert [s["studentId"] for s in response.json()] == ["SV002"]

    @pytest.mark.asyncio
    async def test_search_requires_name(self, client: AsyncClient) -> None:
        response = await client.get(f"{STUDENTS}/search", params={"name": ""})
        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_registrations_of_student(self, client: AsyncClient) -> None:
        await client.post(STUDENTS, json=student_body())
        await client.post(STUDENTS, json=student_body("SV002", "Binh Tran"))
        await client.post("/api/v1/courses", json={"courseId": "PY101", "name": "Python"})
        method = await client.post("/api/v1/payment-methods", json={"name": "Cash"})
        for student_id in ("SV001", "SV002"):
            await client.post(
                "/api/v1/course-registrations",
                json={
                    "studentId": student_id,
                    "courseId": "PY101",
                    "registerDate": "2026-01-05",
                    "fee": 100.0,
                    "paymentMethodId": method.json()["id"],
                },
            )

        response = await client.get(f"{STUDENTS}/SV001/registrations")

        assert response.status_code == 200
        assert [r["studentId"] for r in response.json()] == ["SV001"]

    @pytest.mark.asyncio
    async def test_registrations_of_unknown_student(self, client: AsyncClient) -> None:
        response = await client.get(f"{STUDENTS}/SV404/registrations")
        assert response.status_code == 404
