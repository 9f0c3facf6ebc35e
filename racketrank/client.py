"""
Client for the rankings API with a local leaderboard cache.

Mirrors what the web front end does: remember the detected country for a day,
keep leaderboards for two hours (fifteen minutes for level rankings), and warm
the country leaderboard in the background without ever failing the caller.
"""
import logging
from datetime import datetime, timedelta
from typing import Any, Callable, Dict, Optional

import requests

from racketrank.core.config import settings
from racketrank.core.country_names import is_known
from racketrank.core.exceptions import RankingsClientError
from racketrank.services.cache_layer import MemoryCacheLayer, utcnow

logger = logging.getLogger(__name__)

COUNTRY_RANKINGS_TTL = timedelta(hours=2)
LEVEL_RANKINGS_TTL = timedelta(minutes=15)
DETECTED_COUNTRY_TTL = timedelta(hours=24)
PREFETCH_COOLDOWN = timedelta(minutes=30)

DETECTED_COUNTRY_KEY = "detected_country"


class RankingsClient:

    def __init__(
        self,
        base_url: str = None,
        session: requests.Session = None,
        timeout: float = None,
        clock: Callable[[], datetime] = utcnow
    ):
        self.base_url = (base_url or settings.API_BASE_URL).rstrip("/")
        self.session = session or requests.Session()
        self.timeout = timeout or settings.PROVIDER_TIMEOUT_SECONDS
        self.clock = clock
        self.leaderboards = MemoryCacheLayer(ttl=COUNTRY_RANKINGS_TTL, clock=clock)
        self.locations = MemoryCacheLayer(ttl=DETECTED_COUNTRY_TTL, clock=clock)
        self._last_prefetch: Optional[Dict[str, Any]] = None

    def _get(self, path: str, params: Dict[str, Any]) -> Dict[str, Any]:
        url = f"{self.base_url}{path}"
        params = {k: v for k, v in params.items() if v is not None}
        try:
            resp = self.session.get(url, params=params, timeout=self.timeout)
        except requests.RequestException as e:
            raise RankingsClientError(f"Request to {url} failed: {e}") from e

        try:
            body = resp.json()
        except ValueError:
            body = {}

        if not resp.ok:
            message = body.get("detail") if isinstance(body, dict) else None
            raise RankingsClientError(message or f"HTTP error! status: {resp.status_code}")
        if not isinstance(body, dict) or body.get("success") is False:
            raise RankingsClientError("Malformed response from rankings API")
        return body

    def country_rankings(self, country: str, refresh: bool = False) -> Dict[str, Any]:
        """
        Country leaderboard, from the local cache unless refresh is set.

        The returned dict carries "fetched_at": when the server last built the
        board, i.e. now minus cache_age_seconds for server-side cache hits.
        """
        if not is_known(country):
            raise RankingsClientError('Country is required and cannot be "Unknown"')

        key = f"country:{country}"
        if not refresh:
            cached = self.leaderboards.get_fresh(key)
            if cached is not None:
                logger.debug(f"Using local leaderboard for {country}")
                return cached

        result = self._get("/api/rankings", {"country": country})
        now = self.clock()
        result["fetched_at"] = now - timedelta(seconds=result.get("cache_age_seconds") or 0)
        self.leaderboards.upsert(key, result, ttl=COUNTRY_RANKINGS_TTL)
        return result

    def rankings(
        self,
        level: str,
        district: str = None,
        city: str = None,
        country: str = None,
        lat: float = None,
        lng: float = None,
        refresh: bool = False
    ) -> Dict[str, Any]:
        """District, city or country leaderboard, cached locally for fifteen minutes."""
        params = {
            "level": level, "district": district, "city": city,
            "country": country, "lat": lat, "lng": lng,
        }
        key = "level:" + "|".join(f"{k}={params[k]}" for k in sorted(params))
        if not refresh:
            cached = self.leaderboards.get_fresh(key)
            if cached is not None:
                return cached

        result = self._get("/api/rankings", params)
        self.leaderboards.upsert(key, result, ttl=LEVEL_RANKINGS_TTL)
        return result

    def detect_country(self, lat: float = None, lng: float = None) -> Optional[str]:
        """Country of the caller; remembered for a day once known."""
        country = self.locations.get_fresh(DETECTED_COUNTRY_KEY)
        if country:
            return country

        try:
            location = self._get("/api/location", {"lat": lat, "lng": lng})
        except RankingsClientError as e:
            logger.warning(f"Country lookup failed: {e}")
            return None

        country = location.get("country")
        if not is_known(country):
            return None

        self.locations.upsert(DETECTED_COUNTRY_KEY, country)
        return country

    def prefetch(self, lat: float = None, lng: float = None) -> Optional[Dict[str, Any]]:
        """
        Warm the country leaderboard. Best effort: returns None on any failure.

        Runs at most once per PREFETCH_COOLDOWN; inside the cooldown the
        previous payload is returned without a request.
        """
        now = self.clock()
        if self._last_prefetch and now - self._last_prefetch["prefetched_at"] < PREFETCH_COOLDOWN:
            logger.info("Rankings prefetch: warm cache present, skipping request")
            return self._last_prefetch

        country = self.detect_country(lat, lng)
        if not country:
            logger.warning("Rankings prefetch: country could not be determined")
            return None

        try:
            result = self.country_rankings(country, refresh=True)
        except RankingsClientError as e:
            logger.warning(f"Rankings prefetch failed: {e}")
            return None

        self._last_prefetch = {
            "country": country,
            "data": result["data"],
            "prefetched_at": now,
            "cache_age_seconds": result.get("cache_age_seconds") or 0,
        }
        logger.info(f"Rankings prefetch completed ({country}, {len(result['data'])} players)")
        return self._last_prefetch
