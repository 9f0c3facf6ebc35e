from datetime import timedelta
from unittest.mock import Mock

import pytest
import requests

from racketrank.client import RankingsClient
from racketrank.core.exceptions import RankingsClientError


def api_response(payload, status_code=200):
    resp = Mock()
    resp.ok = status_code < 400
    resp.status_code = status_code
    resp.json.return_value = payload
    return resp


TURKEY_BOARD = {
    "success": True,
    "country": "Turkey",
    "count": 1,
    "data": [{"id": 1, "first_name": "Ayse", "rating": 1800}],
    "cached": True,
    "cache_age_seconds": 600,
}


@pytest.fixture
def session():
    return Mock()


@pytest.fixture
def rankings_client(session, clock):
    return RankingsClient(base_url="http://api.test/", session=session, timeout=5, clock=clock)


def route(session, location=None, board=None):
    """Answer /api/location and /api/rankings from canned payloads."""
    def _get(url, params=None, timeout=None):
        if url.endswith("/api/location"):
            return api_response(location or {"district": "Unknown", "city": "Unknown", "country": "Turkey"})
        return api_response(dict(board or TURKEY_BOARD))
    session.get.side_effect = _get


class TestCountryRankings:

    def test_fetches_and_caches_locally(self, rankings_client, session, clock):
        route(session)

        first = rankings_client.country_rankings("Turkey")
        second = rankings_client.country_rankings("Turkey")

        assert session.get.call_count == 1
        assert first is second
        assert first["fetched_at"] == clock.now - timedelta(seconds=600)
        session.get.assert_called_with(
            "http://api.test/api/rankings", params={"country": "Turkey"}, timeout=5
        )

    def test_local_cache_expires_after_two_hours(self, rankings_client, session, clock):
        route(session)
        rankings_client.country_rankings("Turkey")
        clock.advance(hours=2)
        rankings_client.country_rankings("Turkey")
        assert session.get.call_count == 2

    def test_refresh_bypasses_local_cache(self, rankings_client, session):
        route(session)
        rankings_client.country_rankings("Turkey")
        rankings_client.country_rankings("Turkey", refresh=True)
        assert session.get.call_count == 2

    def test_unknown_country_rejected(self, rankings_client, session):
        with pytest.raises(RankingsClientError):
            rankings_client.country_rankings("Unknown")
        session.get.assert_not_called()

    def test_http_error_uses_detail(self, rankings_client, session):
        session.get.return_value = api_response({"success": False, "detail": "boom"}, status_code=500)
        with pytest.raises(RankingsClientError, match="boom"):
            rankings_client.country_rankings("Turkey")

    def test_http_error_without_body(self, rankings_client, session):
        resp = api_response(None, status_code=502)
        resp.json.side_effect = ValueError("no body")
        session.get.return_value = resp
        with pytest.raises(RankingsClientError, match="HTTP error! status: 502"):
            rankings_client.country_rankings("Turkey")

    def test_connection_error(self, rankings_client, session):
        session.get.side_effect = requests.ConnectionError("refused")
        with pytest.raises(RankingsClientError, match="refused"):
            rankings_client.country_rankings("Turkey")


class TestLevelRankings:

    def test_cached_for_fifteen_minutes(self, rankings_client, session, clock):
        session.get.return_value = api_response({"success": True, "level": "city", "count": 0, "data": []})

        rankings_client.rankings("city", city="Istanbul")
        clock.advance(minutes=14)
        rankings_client.rankings("city", city="Istanbul")
        assert session.get.call_count == 1

        clock.advance(minutes=2)
        rankings_client.rankings("city", city="Istanbul")
        assert session.get.call_count == 2

    def test_none_params_dropped(self, rankings_client, session):
        session.get.return_value = api_response({"success": True, "level": "city", "count": 0, "data": []})
        rankings_client.rankings("city", city="Istanbul")
        assert session.get.call_args[1]["params"] == {"level": "city", "city": "Istanbul"}

    def test_different_params_are_separate_entries(self, rankings_client, session):
        session.get.return_value = api_response({"success": True, "level": "city", "count": 0, "data": []})
        rankings_client.rankings("city", city="Istanbul")
        rankings_client.rankings("city", city="Ankara")
        assert session.get.call_count == 2


class TestDetectCountry:

    def test_remembered_for_a_day(self, rankings_client, session, clock):
        route(session)

        assert rankings_client.detect_country() == "Turkey"
        clock.advance(hours=23)
        assert rankings_client.detect_country() == "Turkey"
        assert session.get.call_count == 1

        clock.advance(hours=2)
        rankings_client.detect_country()
        assert session.get.call_count == 2

    def test_unknown_is_not_remembered(self, rankings_client, session):
        route(session, location={"district": "Unknown", "city": "Unknown", "country": "Unknown"})

        assert rankings_client.detect_country() is None
        assert rankings_client.detect_country() is None
        assert session.get.call_count == 2

    def test_failure_returns_none(self, rankings_client, session):
        session.get.side_effect = requests.Timeout("slow")
        assert rankings_client.detect_country(41.0, 29.0) is None


class TestPrefetch:

    def test_prefetch_payload(self, rankings_client, session, clock):
        route(session)

        payload = rankings_client.prefetch()

        assert payload == {
            "country": "Turkey",
            "data": TURKEY_BOARD["data"],
            "prefetched_at": clock.now,
            "cache_age_seconds": 600,
        }

    def test_cooldown_skips_requests(self, rankings_client, session, clock):
        route(session)
        first = rankings_client.prefetch()
        calls = session.get.call_count

        clock.advance(minutes=29)
        assert rankings_client.prefetch() is first
        assert session.get.call_count == calls

        clock.advance(minutes=2)
        rankings_client.prefetch()
        assert session.get.call_count > calls

    def test_prefetch_always_refreshes_board(self, rankings_client, session):
        route(session)
        rankings_client.country_rankings("Turkey")
        rankings_client.prefetch()
        rankings_paths = [c for c in session.get.call_args_list if c[0][0].endswith("/api/rankings")]
        assert len(rankings_paths) == 2

    def test_failure_never_raises(self, rankings_client, session):
        session.get.side_effect = requests.ConnectionError("down")
        assert rankings_client.prefetch() is None

    def test_board_failure_returns_none(self, rankings_client, session):
        def _get(url, params=None, timeout=None):
            if url.endswith("/api/location"):
                return api_response({"district": "Unknown", "city": "Unknown", "country": "Turkey"})
            return api_response({"success": False, "detail": "db down"}, status_code=500)
        session.get.side_effect = _get

        assert rankings_client.prefetch() is None
