"""
Tests for property service
"""
import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from core.exceptions import NotFoundException
from schemas.review import PropertyStats
from services.properties import PropertyService


class TestListPropertyStats:

    async def test_one_entry_per_property(self, db_session: AsyncSession, review_factory):
        await review_factory(property_id="p1", property_name="Prop One", rating=8.0)
        await review_factory(property_id="p1", property_name="Prop One", rating=6.0)
        await review_factory(property_id="p2", property_name="Prop Two", source="google", rating=4.0)

        stats = await PropertyService(db_session).list_property_stats()

        assert all(isinstance(s, PropertyStats) for s in stats)
        by_id = {s.property_id: s for s in stats}
        assert set(by_id) == {"p1", "p2"}
        assert by_id["p1"].total_reviews == 2
        assert by_id["p1"].average_rating == 3.5
        assert by_id["p2"].average_rating == 4.0

    async def test_no_reviews(self, db_session: AsyncSession):
        assert await PropertyService(db_session).list_property_stats() == []


class TestPropertyDetail:

    async def test_unknown_property(self, db_session: AsyncSession):
        with pytest.raises(NotFoundException):
            await PropertyService(db_session).get_property_detail("nowhere")
