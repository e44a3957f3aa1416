"""
Tests for review service
"""
import uuid
from datetime import datetime, timezone

import pytest
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from core.config import settings
from core.exceptions import NotFoundException
from models.review import Review, ReviewCategory
from schemas.review import ReviewUpdate
from services.review import ReviewService


async def count_rows(session: AsyncSession, model) -> int:
    return (await session.execute(select(func.count()).select_from(model))).scalar_one()


class TestUpsertReview:

    async def test_new_review_is_stored_with_categories(self, db_session: AsyncSession, review_data):
        service = ReviewService(db_session)

        review, created = await service.upsert_review(review_data(
            rating=None,
            categories=[{"category": "cleanliness", "rating": 10}, {"category": "communication", "rating": 9}],
        ))

        assert created is True
        assert review.id is not None
        assert review.rating is None
        assert [c.category for c in review.categories] == ["cleanliness", "communication"]
        assert review.is_approved_for_public is False

    async def test_same_natural_key_is_stored_once(self, db_session: AsyncSession, review_data):
        service = ReviewService(db_session)
        payload = review_data(categories=[{"category": "value", "rating": 7}])

        first, first_created = await service.upsert_review(payload)
        second, second_created = await service.upsert_review(payload)

        assert first_created is True
        assert second_created is False
        assert second.id == first.id
        assert await count_rows(db_session, Review) == 1
        assert await count_rows(db_session, ReviewCategory) == 1

    async def test_existing_review_is_returned_unchanged(self, db_session: AsyncSession, review_data):
        service = ReviewService(db_session)
        payload = review_data(public_review="original text")
        stored, _ = await service.upsert_review(payload)
        await service.update_review(ReviewUpdate(id=str(stored.id), is_approved_for_public=True))

        again, created = await service.upsert_review(payload.model_copy(update={"public_review": "new text"}))

        assert created is False
        assert again.public_review == "original text"
        assert again.is_approved_for_public is True

    async def test_different_property_is_a_different_review(self, db_session: AsyncSession, review_data):
        service = ReviewService(db_session)
        submitted_at = datetime(2024, 6, 1, tzinfo=timezone.utc)

        await service.upsert_review(review_data(guest_name="Ann", submitted_at=submitted_at, property_id="a"))
        await service.upsert_review(review_data(guest_name="Ann", submitted_at=submitted_at, property_id="b"))

        assert await count_rows(db_session, Review) == 2


class TestListReviews:

    async def test_pagination_over_25_reviews(self, db_session: AsyncSession, review_factory):
        for _ in range(25):
            await review_factory()
        service = ReviewService(db_session)

        page_2 = await service.list_reviews(page=2, limit=10)
        page_3 = await service.list_reviews(page=3, limit=10)
        page_4 = await service.list_reviews(page=4, limit=10)

        assert len(page_2["data"]) == 10
        assert len(page_3["data"]) == 5
        assert len(page_4["data"]) == 0
        assert page_3["pagination"] == {"page": 3, "limit": 10, "total": 25, "pages": 3}

    async def test_pages_do_not_overlap(self, db_session: AsyncSession, review_factory):
        for _ in range(7):
            await review_factory()
        service = ReviewService(db_session)

        first = await service.list_reviews(page=1, limit=4)
        second = await service.list_reviews(page=2, limit=4)

        ids = [r.id for r in first["data"]] + [r.id for r in second["data"]]
        assert len(ids) == len(set(ids)) == 7

    async def test_page_and_limit_are_clamped(self, db_session: AsyncSession, review_factory):
        await review_factory()
        service = ReviewService(db_session)

        result = await service.list_reviews(page=0, limit=settings.MAX_PAGE_SIZE + 500)
        assert result["pagination"]["page"] == 1
        assert result["pagination"]["limit"] == settings.MAX_PAGE_SIZE

        result = await service.list_reviews(page=-3, limit=0)
        assert result["pagination"]["page"] == 1
        assert result["pagination"]["limit"] == settings.DEFAULT_PAGE_SIZE

        result = await service.list_reviews(limit=-5)
        assert result["pagination"]["limit"] == 1

    async def test_rating_bounds_are_inclusive_and_skip_unrated(self, db_session: AsyncSession, review_factory):
        for rating in [None, 4.0, 6.9, 7.0, 8.5, 10.0]:
            await review_factory(rating=rating)
        service = ReviewService(db_session)

        result = await service.list_reviews(min_rating=7, max_rating=10)

        assert sorted(r.rating for r in result["data"]) == [7.0, 8.5, 10.0]
        assert result["pagination"]["total"] == 3

    async def test_single_rating_bound(self, db_session: AsyncSession, review_factory):
        for rating in [None, 2.0, 9.0]:
            await review_factory(rating=rating)
        service = ReviewService(db_session)

        result = await service.list_reviews(max_rating=5)

        assert [r.rating for r in result["data"]] == [2.0]

    async def test_search_matches_guest_text_or_property(self, db_session: AsyncSession, review_factory):
        await review_factory(guest_name="Emma Clarke")
        await review_factory(public_review="Heating was BROKEN")
        await review_factory(property_name="Canary Wharf Tower")
        await review_factory(guest_name="Nobody", public_review="fine", property_name="Elsewhere")
        service = ReviewService(db_session)

        assert len((await service.list_reviews(search="emma"))["data"]) == 1
        assert len((await service.list_reviews(search="broken"))["data"]) == 1
        assert len((await service.list_reviews(search="canary"))["data"]) == 1
        assert len((await service.list_reviews(search="zzz"))["data"]) == 0

    async def test_search_wildcards_match_literally(self, db_session: AsyncSession, review_factory):
        await review_factory(guest_name="Emma Clarke", public_review="Great stay")
        await review_factory(guest_name="Ann_Lee", public_review="100% recommended")
        service = ReviewService(db_session)

        assert [r.guest_name for r in (await service.list_reviews(search="%"))["data"]] == ["Ann_Lee"]
        assert [r.guest_name for r in (await service.list_reviews(search="_"))["data"]] == ["Ann_Lee"]
        assert len((await service.list_reviews(search="\\"))["data"]) == 0

    async def test_exact_filters(self, db_session: AsyncSession, review_factory):
        await review_factory(source="google", rating=4.0, property_id="p1")
        await review_factory(source="hostaway", status="pending", property_id="p1")
        await review_factory(source="hostaway", property_id="p2")
        service = ReviewService(db_session)

        assert len((await service.list_reviews(source="google"))["data"]) == 1
        assert len((await service.list_reviews(status="pending"))["data"]) == 1
        assert len((await service.list_reviews(property_id="p1"))["data"]) == 2
        assert len((await service.list_reviews(property_id="p1", source="hostaway"))["data"]) == 1

    async def test_date_range_is_inclusive(self, db_session: AsyncSession, review_factory):
        for day in (1, 10, 20):
            await review_factory(submitted_at=datetime(2024, 3, day, tzinfo=timezone.utc))
        service = ReviewService(db_session)

        result = await service.list_reviews(
            start_date=datetime(2024, 3, 1, tzinfo=timezone.utc),
            end_date=datetime(2024, 3, 10, tzinfo=timezone.utc),
        )
        assert sorted(r.submitted_at.day for r in result["data"]) == [1, 10]

        result = await service.list_reviews(start_date=datetime(2024, 3, 11, tzinfo=timezone.utc))
        assert [r.submitted_at.day for r in result["data"]] == [20]

    async def test_default_sort_is_newest_first(self, db_session: AsyncSession, review_factory):
        for day in (5, 25, 15):
            await review_factory(submitted_at=datetime(2024, 4, day, tzinfo=timezone.utc))
        service = ReviewService(db_session)

        result = await service.list_reviews()

        assert [r.submitted_at.day for r in result["data"]] == [25, 15, 5]

    async def test_sort_by_camel_case_field_ascending(self, db_session: AsyncSession, review_factory):
        for rating in (9.0, 3.0, 6.0):
            await review_factory(rating=rating)
        service = ReviewService(db_session)

        result = await service.list_reviews(sort_by="rating", sort_order="asc")
        assert [r.rating for r in result["data"]] == [3.0, 6.0, 9.0]

        result = await service.list_reviews(sort_by="guestName", sort_order="asc")
        names = [r.guest_name for r in result["data"]]
        assert names == sorted(names)

    async def test_unknown_sort_field_falls_back_to_submitted_at(self, db_session: AsyncSession, review_factory):
        for day in (2, 4):
            await review_factory(submitted_at=datetime(2024, 5, day, tzinfo=timezone.utc))
        service = ReviewService(db_session)

        result = await service.list_reviews(sort_by="DROP TABLE reviews")

        assert [r.submitted_at.day for r in result["data"]] == [4, 2]

    async def test_results_carry_display_ratings(self, db_session: AsyncSession, review_factory):
        await review_factory(rating=9.0, categories=[{"category": "cleanliness", "rating": 10}])
        service = ReviewService(db_session)

        result = await service.list_reviews()

        item = result["data"][0]
        assert item.normalized_rating == 4.5
        assert item.categories[0].display_rating == 10.0


class TestUpdateReview:

    async def test_approve_review(self, db_session: AsyncSession, review_factory):
        stored = await review_factory()
        service = ReviewService(db_session)

        updated = await service.update_review(ReviewUpdate(id=str(stored.id), is_approved_for_public=True))

        assert updated.is_approved_for_public is True
        assert updated.manager_notes is None

    async def test_only_supplied_fields_change(self, db_session: AsyncSession, review_factory):
        stored = await review_factory()
        service = ReviewService(db_session)
        await service.update_review(ReviewUpdate(id=str(stored.id), is_approved_for_public=True))

        updated = await service.update_review(ReviewUpdate(id=str(stored.id), manager_notes="Call the guest"))

        assert updated.manager_notes == "Call the guest"
        assert updated.is_approved_for_public is True

    async def test_update_keeps_categories_loaded(self, db_session: AsyncSession, review_factory):
        stored = await review_factory(categories=[{"category": "location", "rating": 9}])
        service = ReviewService(db_session)

        updated = await service.update_review(ReviewUpdate(id=str(stored.id), is_approved_for_public=False))

        assert [c.category for c in updated.categories] == ["location"]

    async def test_unknown_id_is_not_found(self, db_session: AsyncSession):
        service = ReviewService(db_session)

        with pytest.raises(NotFoundException):
            await service.update_review(ReviewUpdate(id=str(uuid.uuid4()), is_approved_for_public=True))

    async def test_malformed_id_is_not_found(self, db_session: AsyncSession):
        service = ReviewService(db_session)

        with pytest.raises(NotFoundException):
            await service.update_review(ReviewUpdate(id="not-a-uuid", is_approved_for_public=True))


class TestDeleteMockGoogleReviews:

    async def test_deletes_only_google_reviews_with_demo_names(self, db_session: AsyncSession, review_factory):
        await review_factory(source="google", guest_name="David Smith", rating=5.0)
        await review_factory(source="google", guest_name="Maria Rodriguez", rating=4.0)
        await review_factory(source="google", guest_name="Real Person", rating=3.0)
        await review_factory(source="hostaway", guest_name="John Anderson",
                             categories=[{"category": "value", "rating": 8}])
        service = ReviewService(db_session)

        deleted = await service.delete_mock_google_reviews()

        assert deleted == 2
        remaining = (await service.list_reviews())["data"]
        assert sorted(r.guest_name for r in remaining) == ["John Anderson", "Real Person"]
        assert await count_rows(db_session, ReviewCategory) == 1

    async def test_nothing_to_delete(self, db_session: AsyncSession, review_factory):
        await review_factory()
        service = ReviewService(db_session)

        assert await service.delete_mock_google_reviews() == 0


class TestPropertyLookups:

    async def test_known_properties_and_names(self, db_session: AsyncSession, review_factory):
        await review_factory(property_id="b", property_name="Bravo")
        await review_factory(property_id="a", property_name="Alpha")
        await review_factory(property_id="a", property_name="Alpha")
        service = ReviewService(db_session)

        assert await service.get_known_properties() == [("a", "Alpha"), ("b", "Bravo")]
        assert await service.get_property_name("b") == "Bravo"
        assert await service.get_property_name("missing") is None

    async def test_approved_only_filter(self, db_session: AsyncSession, review_factory):
        approved = await review_factory(property_id="a")
        await review_factory(property_id="a")
        service = ReviewService(db_session)
        await service.update_review(ReviewUpdate(id=str(approved.id), is_approved_for_public=True))

        reviews = await service.get_reviews(property_id="a", approved_only=True)

        assert [r.id for r in reviews] == [approved.id]
