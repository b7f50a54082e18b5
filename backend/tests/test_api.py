"""
ChurchFinder Backend — REST API Tests
=====================================

What:  Endpoint behavior through the full app (middleware, handlers,
       sessions) over httpx.ASGITransport.

What we test:
    ✅ Find-or-create by place id, with and without seed parameters
    ✅ Create / duplicate / partial update of churches
    ✅ Service time and review sub-resources, including 400 before 404
    ✅ Error body shape and request id propagation
    ✅ Denominations and church listing
    ✅ Health check
"""

import pytest
from sqlalchemy import func, select

from churchfinder.models import Church, Review, ServiceTime

SEED_PARAMS = {"name": "Grace Chapel", "vicinity": "1 Elm St", "lat": "40.70", "lng": "-74.01", "rating": "4.5"}


async def count(db, model) -> int:
    return (await db.execute(select(func.count()).select_from(model))).scalar_one()


def assert_error(response, status: int, message: str, code: str) -> None:
    assert response.status_code == status
    body = response.json()
    assert body["error"] == message
    assert body["code"] == code
    assert body["request_id"] == response.headers["X-Request-ID"]


class TestFindOrCreateEndpoint:

    @pytest.mark.asyncio
    async def test_new_place_id_creates_church(self, test_client, db_session):
        response = await test_client.get("/api/churches/ChIJ-grace", params=SEED_PARAMS)

        assert response.status_code == 200
        body = response.json()
        assert body["place_id"] == "ChIJ-grace"
        assert body["lat"] == "40.70"
        assert body["serviceTimes"] == []
        assert body["reviews"] == []
        assert await count(db_session, Church) == 1

    @pytest.mark.asyncio
    async def test_repeat_lookup_returns_same_church(self, test_client, db_session):
        first = await test_client.get("/api/churches/ChIJ-grace", params=SEED_PARAMS)
        second = await test_client.get("/api/churches/ChIJ-grace")

        assert first.json()["id"] == second.json()["id"]
        assert await count(db_session, Church) == 1

    @pytest.mark.asyncio
    async def test_unknown_place_without_seed_is_400(self, test_client, db_session):
        response = await test_client.get("/api/churches/ChIJ-nobody")

        assert_error(response, 400, "Invalid church data", "validation_error")
        assert await count(db_session, Church) == 0

    @pytest.mark.asyncio
    async def test_invalid_seed_is_400(self, test_client, db_session):
        response = await test_client.get(
            "/api/churches/ChIJ-bad", params={**SEED_PARAMS, "lat": "north-ish"}
        )

        assert_error(response, 400, "Invalid church data", "validation_error")
        assert await count(db_session, Church) == 0


class TestChurchWrites:

    @pytest.mark.asyncio
    async def test_create_and_duplicate(self, test_client):
        body = {"placeId": "ChIJ-new", "name": "Trinity", "vicinity": "5 Oak Ave", "lat": "40.1", "lng": "-73.9"}

        created = await test_client.post("/api/churches", json=body)
        duplicate = await test_client.post("/api/churches", json=body)

        assert created.status_code == 201
        assert created.json()["place_id"] == "ChIJ-new"
        assert_error(duplicate, 409, "A church with this place id already exists", "conflict")

    @pytest.mark.asyncio
    async def test_create_rejects_missing_fields(self, test_client):
        response = await test_client.post("/api/churches", json={"place_id": "x"})
        assert_error(response, 400, "Invalid church data", "validation_error")

    @pytest.mark.asyncio
    async def test_create_rejects_non_object_body(self, test_client):
        response = await test_client.post("/api/churches", json=["not", "an", "object"])
        assert_error(response, 400, "Invalid church data", "validation_error")

    @pytest.mark.asyncio
    async def test_patch_updates_business_fields(self, test_client, church):
        response = await test_client.patch(
            f"/api/churches/{church.id}", json={"denomination": "Catholic", "phone": "555-0100"}
        )

        assert response.status_code == 200
        body = response.json()
        assert body["denomination"] == "Catholic"
        assert body["phone"] == "555-0100"
        assert body["place_id"] == church.place_id

        denominations = await test_client.get("/api/churches/denominations")
        assert denominations.json() == ["Catholic"]

    @pytest.mark.asyncio
    async def test_patch_rejects_place_id(self, test_client, church):
        response = await test_client.patch(f"/api/churches/{church.id}", json={"place_id": "other"})
        assert_error(response, 400, "Invalid church data", "validation_error")

    @pytest.mark.asyncio
    async def test_patch_unknown_id_is_404(self, test_client, church, db_session):
        response = await test_client.patch("/api/churches/9999", json={"phone": "1"})

        assert response.status_code == 404
        assert response.json()["code"] == "not_found"
        listing = (await test_client.get("/api/churches")).json()
        assert [c["phone"] for c in listing] == [None]

    @pytest.mark.asyncio
    async def test_non_integer_church_id_is_400(self, test_client):
        response = await test_client.patch("/api/churches/abc", json={"phone": "1"})
        assert_error(response, 400, "Invalid request data", "validation_error")


class TestServiceTimesEndpoint:

    @pytest.mark.asyncio
    async def test_add_service_time_appears_in_aggregate(self, test_client, church):
        response = await test_client.post(
            f"/api/churches/{church.id}/service-times",
            json={"day_of_week": 0, "start_time": "09:00", "end_time": "10:30", "service_type": "Mass", "language": "Spanish"},
        )

        assert response.status_code == 201
        created = response.json()
        assert created["start_time"] == "09:00:00"
        assert created["language"] == "Spanish"

        detail = (await test_client.get(f"/api/churches/{church.place_id}")).json()
        assert [s["id"] for s in detail["serviceTimes"]] == [created["id"]]

        listing = (await test_client.get("/api/churches")).json()
        assert listing[0]["serviceTimes"][0]["service_type"] == "Mass"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("day", [-1, 7])
    async def test_day_out_of_range_is_400(self, test_client, church, db_session, day):
        response = await test_client.post(
            f"/api/churches/{church.id}/service-times",
            json={"day_of_week": day, "start_time": "09:00", "end_time": "10:00"},
        )

        assert_error(response, 400, "Invalid service time data", "validation_error")
        assert await count(db_session, ServiceTime) == 0

    @pytest.mark.asyncio
    async def test_boolean_day_is_400(self, test_client, church, db_session):
        response = await test_client.post(
            f"/api/churches/{church.id}/service-times",
            json={"dayOfWeek": True, "startTime": "09:00", "endTime": "10:00"},
        )

        assert_error(response, 400, "Invalid service time data", "validation_error")
        assert await count(db_session, ServiceTime) == 0

    @pytest.mark.asyncio
    async def test_unknown_church_is_404(self, test_client):
        response = await test_client.post(
            "/api/churches/9999/service-times",
            json={"day_of_week": 1, "start_time": "09:00", "end_time": "10:00"},
        )
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_invalid_body_checked_before_church(self, test_client):
        response = await test_client.post("/api/churches/9999/service-times", json={"day_of_week": 9})
        assert response.status_code == 400


class TestReviewsEndpoint:

    @pytest.mark.asyncio
    async def test_review_is_listed_first(self, test_client, church):
        await test_client.post(f"/api/churches/{church.id}/reviews", json={"user_name": "Bob", "rating": 3})
        response = await test_client.post(
            f"/api/churches/{church.id}/reviews",
            json={"user_name": "Alice", "rating": 5, "comment": "Great"},
        )

        assert response.status_code == 201
        created = response.json()
        assert created["id"]
        assert created["created_at"]

        detail = (await test_client.get(f"/api/churches/{church.place_id}")).json()
        assert detail["reviews"][0]["user_name"] == "Alice"
        assert detail["reviews"][0]["comment"] == "Great"
        assert len(detail["reviews"]) == 2

    @pytest.mark.asyncio
    @pytest.mark.parametrize("rating", [0, 5.5, "five", True])
    async def test_rating_out_of_range_is_400(self, test_client, church, db_session, rating):
        response = await test_client.post(
            f"/api/churches/{church.id}/reviews", json={"user_name": "Alice", "rating": rating}
        )

        assert_error(response, 400, "Invalid review data", "validation_error")
        assert await count(db_session, Review) == 0

    @pytest.mark.asyncio
    async def test_blank_user_name_is_400(self, test_client, church):
        response = await test_client.post(
            f"/api/churches/{church.id}/reviews", json={"user_name": "   ", "rating": 4}
        )
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_unknown_church_is_404(self, test_client):
        response = await test_client.post("/api/churches/4242/reviews", json={"user_name": "Alice", "rating": 4})

        assert response.status_code == 404
        assert response.json()["error"] == "Church not found"


class TestCrossCutting:

    @pytest.mark.asyncio
    async def test_request_id_is_echoed(self, test_client):
        response = await test_client.get("/api/churches", headers={"X-Request-ID": "abc12345"})

        assert response.status_code == 200
        assert response.headers["X-Request-ID"] == "abc12345"

    @pytest.mark.asyncio
    async def test_request_id_generated(self, test_client):
        response = await test_client.get("/api/churches/denominations")

        assert response.json() == []
        assert len(response.headers["X-Request-ID"]) == 8

    @pytest.mark.asyncio
    async def test_health(self, test_client):
        response = await test_client.get("/health")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "healthy"
        assert body["database"] == "connected"
