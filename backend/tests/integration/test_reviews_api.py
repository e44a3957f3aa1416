"""
Integration tests for the review listing and approval endpoints
"""
import uuid

from httpx import AsyncClient


class TestListReviewsEndpoint:

    async def test_envelope_and_wire_format(self, async_client: AsyncClient, review_factory):
        await review_factory(
            guest_name="Emma Clarke",
            rating=9.0,
            categories=[{"category": "cleanliness", "rating": 10}],
        )

        response = await async_client.get("/reviews")

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["pagination"] == {"page": 1, "limit": 100, "total": 1, "pages": 1}
        review = body["data"][0]
        assert review["guestName"] == "Emma Clarke"
        assert review["isApprovedForPublic"] is False
        assert review["rating"] == 9.0
        assert review["normalizedRating"] == 4.5
        assert review["categories"][0]["category"] == "cleanliness"
        assert review["categories"][0]["displayRating"] == 10.0

    async def test_empty_store(self, async_client: AsyncClient):
        response = await async_client.get("/reviews")

        body = response.json()
        assert body["data"] == []
        assert body["pagination"]["total"] == 0
        assert body["pagination"]["pages"] == 0

    async def test_camel_case_filters(self, async_client: AsyncClient, review_factory):
        for rating in [None, 5.0, 7.0, 9.5]:
            await review_factory(rating=rating, property_id="p1")
        await review_factory(rating=8.0, property_id="p2")

        response = await async_client.get(
            "/reviews", params={"minRating": 7, "maxRating": 10, "propertyId": "p1", "sortBy": "rating", "sortOrder": "asc"}
        )

        assert [r["rating"] for r in response.json()["data"]] == [7.0, 9.5]

    async def test_pagination_parameters(self, async_client: AsyncClient, review_factory):
        for _ in range(25):
            await review_factory()

        response = await async_client.get("/reviews", params={"page": 3, "limit": 10})

        body = response.json()
        assert len(body["data"]) == 5
        assert body["pagination"] == {"page": 3, "limit": 10, "total": 25, "pages": 3}

    async def test_out_of_range_page_is_clamped(self, async_client: AsyncClient, review_factory):
        await review_factory()

        response = await async_client.get("/reviews", params={"page": 0})

        assert response.json()["pagination"]["page"] == 1

    async def test_non_numeric_rating_is_invalid_input(self, async_client: AsyncClient):
        response = await async_client.get("/reviews", params={"minRating": "high"})

        assert response.status_code == 400
        body = response.json()
        assert body["success"] is False
        assert body["error"] == "Invalid input provided"
        assert "minRating" in body["details"]


class TestUpdateReviewEndpoint:

    async def test_approve_review(self, async_client: AsyncClient, review_factory):
        stored = await review_factory()

        response = await async_client.patch("/reviews", json={"id": str(stored.id), "isApprovedForPublic": True})

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["data"]["isApprovedForPublic"] is True
        assert body["message"] == "Review approved for public display"

    async def test_notes_only_update_keeps_approval(self, async_client: AsyncClient, review_factory):
        stored = await review_factory()
        await async_client.patch("/reviews", json={"id": str(stored.id), "isApprovedForPublic": True})

        response = await async_client.patch("/reviews", json={"id": str(stored.id), "managerNotes": "Lovely guest"})

        data = response.json()["data"]
        assert data["managerNotes"] == "Lovely guest"
        assert data["isApprovedForPublic"] is True
        assert response.json()["message"] == "Review updated successfully"

    async def test_reject_review(self, async_client: AsyncClient, review_factory):
        stored = await review_factory()

        response = await async_client.patch("/reviews", json={"id": str(stored.id), "isApprovedForPublic": False})

        assert response.json()["message"] == "Review rejected"

    async def test_missing_id_is_invalid_input(self, async_client: AsyncClient):
        response = await async_client.patch("/reviews", json={"isApprovedForPublic": True})

        assert response.status_code == 400
        assert response.json()["error"] == "Invalid input provided"

    async def test_empty_id_is_invalid_input(self, async_client: AsyncClient):
        response = await async_client.patch("/reviews", json={"id": "", "isApprovedForPublic": True})

        assert response.status_code == 400

    async def test_numeric_id_is_invalid_input(self, async_client: AsyncClient):
        response = await async_client.patch("/reviews", json={"id": 42, "isApprovedForPublic": True})

        assert response.status_code == 400

    async def test_non_boolean_approval_is_invalid_input(self, async_client: AsyncClient, review_factory):
        stored = await review_factory()

        response = await async_client.patch("/reviews", json={"id": str(stored.id), "isApprovedForPublic": "yes"})

        assert response.status_code == 400

    async def test_null_notes_are_invalid_input(self, async_client: AsyncClient, review_factory):
        stored = await review_factory()

        response = await async_client.patch("/reviews", json={"id": str(stored.id), "managerNotes": None})

        assert response.status_code == 400

    async def test_unknown_review_is_not_found(self, async_client: AsyncClient):
        response = await async_client.patch("/reviews", json={"id": str(uuid.uuid4()), "isApprovedForPublic": True})

        assert response.status_code == 404
        assert response.json() == {"success": False, "error": "Review not found"}

    async def test_malformed_id_is_not_found(self, async_client: AsyncClient):
        response = await async_client.patch("/reviews", json={"id": "review-1", "isApprovedForPublic": True})

        assert response.status_code == 404
