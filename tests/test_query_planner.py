from unittest.mock import Mock

import pytest
from sqlalchemy.exc import OperationalError

from racketrank.core.exceptions import StoreQueryError
from racketrank.schemas.location import LocationLevel, LocationQuery
from racketrank.services.query_planner import QueryFilter, RankingQueryPlanner

pytestmark = pytest.mark.usefixtures("db_cleanup")


@pytest.fixture
def planner():
    return RankingQueryPlanner()


class TestPlan:

    def test_country_expands_variants(self, planner):
        query = LocationQuery(level=LocationLevel.COUNTRY, country="türkiye")

        query_filter = planner.plan(LocationLevel.COUNTRY, query)

        assert query_filter.column == "country"
        assert "Turkiye" in query_filter.patterns
        assert "Türkiye" in query_filter.patterns
        assert query_filter.limit == 10

    def test_district_uses_region_column(self, planner):
        query = LocationQuery(level=LocationLevel.DISTRICT, district="Kadikoy", country="Turkey")

        query_filter = planner.plan(LocationLevel.DISTRICT, query)

        assert query_filter == QueryFilter(column="region", patterns=("Kadikoy",), limit=100)

    def test_city_is_not_expanded(self, planner):
        query = LocationQuery(level=LocationLevel.CITY, city="Istanbul")
        assert planner.plan(LocationLevel.CITY, query).patterns == ("Istanbul",)

    @pytest.mark.parametrize("city", [None, "", "Unknown"])
    def test_no_filter_without_target(self, planner, city):
        query = LocationQuery(level=LocationLevel.CITY, city=city, country="Turkey")
        assert planner.plan(LocationLevel.CITY, query) is None


class TestExecute:

    def test_excludes_unrated_and_orders_by_rating(self, planner, db_session, add_profile):
        add_profile(first_name="Low", rating=1200, country="Turkiye")
        add_profile(first_name="None", rating=None, country="Turkiye")
        add_profile(first_name="High", rating=2200, country="Türkiye")
        add_profile(first_name="Other", rating=2500, country="Greece")

        query_filter = planner.plan(
            LocationLevel.COUNTRY, LocationQuery(level=LocationLevel.COUNTRY, country="Turkey")
        )
        rows = planner.execute(db_session, query_filter)

        assert [r.first_name for r in rows] == ["High", "Low"]

    def test_respects_limit(self, planner, db_session, add_profile):
        for i in range(12):
            add_profile(first_name=f"P{i}", rating=1000 + i, country="Turkey")

        query_filter = planner.plan(
            LocationLevel.COUNTRY, LocationQuery(level=LocationLevel.COUNTRY, country="Turkey")
        )
        rows = planner.execute(db_session, query_filter)

        assert len(rows) == 10
        assert rows[0].first_name == "P11"

    @pytest.mark.parametrize("wildcard", ["%", "_", "Ist%"])
    def test_like_wildcards_match_literally(self, planner, db_session, add_profile, wildcard):
        add_profile(first_name="A", rating=1500, city="Ankara")
        add_profile(first_name="B", rating=1600, city="Istanbul")

        rows = planner.execute(db_session, QueryFilter(column="city", patterns=(wildcard,), limit=100))

        assert rows == []

    def test_literal_percent_still_matches(self, planner, db_session, add_profile):
        add_profile(first_name="A", rating=1500, city="100% Town")
        add_profile(first_name="B", rating=1600, city="1000 Town")

        rows = planner.execute(db_session, QueryFilter(column="city", patterns=("0%",), limit=100))

        assert [r.first_name for r in rows] == ["A"]

    def test_store_failure_raises(self, planner):
        db = Mock()
        db.query.side_effect = OperationalError("SELECT", {}, Exception("database is locked"))

        with pytest.raises(StoreQueryError):
            planner.execute(db, QueryFilter(column="city", patterns=("Izmir",), limit=100))
        db.rollback.assert_called_once()


class TestInterpret:

    def test_count_and_data(self, planner, add_profile):
        profile = add_profile(first_name="Ayse", last_name="Yilmaz", rating=1800,
                              region="Kadikoy", city="Istanbul", country="Turkiye")

        result = planner.interpret([profile])

        assert result["count"] == 1
        assert result["data"][0] == {
            "id": profile.id,
            "first_name": "Ayse",
            "last_name": "Yilmaz",
            "rating": 1800,
            "region": "Kadikoy",
            "city": "Istanbul",
            "country": "Turkiye",
            "avatar_url": None,
        }

    def test_empty(self, planner):
        assert planner.interpret([]) == {"count": 0, "data": []}
