"""
Location-scoped leaderboards with a cached country layer.
"""
import logging
from datetime import datetime, timedelta
from typing import Any, Callable, Dict, Optional

from sqlalchemy.orm import Session

from racketrank.core.config import settings
from racketrank.core.country_names import (
    UNKNOWN, is_known, normalize_country, to_store_spelling, variants_for
)
from racketrank.core.exceptions import ClientInputError
from racketrank.models.cache import CountryRankingsCache
from racketrank.schemas.location import Coordinates, LocationLevel, LocationQuery, LocationTriple
from racketrank.services.cache_layer import CacheLayer, age_seconds, utcnow
from racketrank.services.geo_resolver import GeoResolver
from racketrank.services.query_planner import RankingQueryPlanner, ranking_query_planner

logger = logging.getLogger(__name__)


def parse_level(level: Optional[str]) -> LocationLevel:
    try:
        return LocationLevel((level or "").strip().lower())
    except ValueError:
        raise ClientInputError("Invalid level parameter. Must be: district, city, or country")


class LeaderboardCacheService:
    """
    Coordinates GeoResolver -> RankingQueryPlanner with the country rankings cache.

    Country-level results are cached per canonical country; district and city
    results are computed per request.
    """

    def __init__(
        self,
        db: Session,
        geo_resolver: GeoResolver = None,
        planner: RankingQueryPlanner = None,
        clock: Callable[[], datetime] = utcnow
    ):
        self.db = db
        self.clock = clock
        self.geo_resolver = geo_resolver or GeoResolver(db, clock=clock)
        self.planner = planner or ranking_query_planner
        self.rankings_cache = CacheLayer(
            db, CountryRankingsCache, "country",
            ttl=timedelta(minutes=settings.RANKINGS_CACHE_TTL_MINUTES),
            clock=clock
        )

    def get_country_rankings(self, country: Optional[str]) -> Dict[str, Any]:
        """Top players for a country, served from cache while fresh."""
        if not is_known(country):
            raise ClientInputError('Country is required and cannot be "Unknown"')

        normalized = normalize_country(country)
        logger.info(f"Normalized country: '{country}' -> '{normalized}'")

        cached = self.rankings_cache.get_fresh(normalized)
        if cached is not None:
            cache_age = age_seconds(cached.updated_at, self.clock())
            logger.info(f"Cache HIT for country {normalized} (age {cache_age}s)")
            rankings = cached.get_rankings()
            return {
                "success": True,
                "country": normalized,
                "count": len(rankings),
                "data": rankings,
                "cached": True,
                "cache_age_seconds": cache_age,
            }

        logger.info(f"Cache MISS for country {normalized} - querying profile store")
        result = self._query(LocationLevel.COUNTRY, LocationQuery(level=LocationLevel.COUNTRY, country=normalized))

        # Never cache an empty board: a player may get rated a minute from now
        if result["count"] > 0:
            stored = self.rankings_cache.upsert(
                normalized,
                country_variants=variants_for(normalized),
                rankings=result["data"],
            )
            if stored:
                logger.info(f"Cached rankings for {normalized} ({result['count']} players)")

        return {
            "success": True,
            "country": normalized,
            "count": result["count"],
            "data": result["data"],
            "cached": False,
            "cache_age_seconds": None,
        }

    def get_rankings(
        self,
        level: Optional[str],
        district: Optional[str] = None,
        city: Optional[str] = None,
        country: Optional[str] = None,
        coordinates: Optional[Coordinates] = None,
        client_ip: Optional[str] = None
    ) -> Dict[str, Any]:
        """Leaderboard for a district, city or country."""
        location_level = parse_level(level)
        hinted = {"district": district, "city": city, "country": country}

        if not is_known(hinted[location_level.value]) and coordinates is None:
            raise ClientInputError(
                f"{location_level.value.capitalize()} is required and cannot be \"Unknown\""
            )

        if location_level == LocationLevel.COUNTRY:
            return self._country_level(country, coordinates, client_ip)

        if coordinates is not None and not any(is_known(v) for v in hinted.values()):
            location = self.geo_resolver.resolve(
                coordinates=coordinates,
                client_ip=client_ip,
                country_mapper=to_store_spelling
            )
        else:
            location = LocationTriple(
                district=district if is_known(district) else UNKNOWN,
                city=city if is_known(city) else UNKNOWN,
                country=to_store_spelling(country) if is_known(country) else UNKNOWN,
            )

        query = LocationQuery(
            level=location_level,
            district=location.district,
            city=location.city,
            country=location.country,
            coordinates=coordinates,
        )
        result = self._query(location_level, query)
        return {
            "success": True,
            "level": location_level,
            "count": result["count"],
            "data": result["data"],
            "cached": False,
            "location": location,
        }

    def _country_level(
        self,
        country: Optional[str],
        coordinates: Optional[Coordinates],
        client_ip: Optional[str]
    ) -> Dict[str, Any]:
        if is_known(country):
            location = LocationTriple(country=normalize_country(country))
        else:
            location = self.geo_resolver.resolve(coordinates=coordinates, client_ip=client_ip)

        if not is_known(location.country):
            return {
                "success": True,
                "level": LocationLevel.COUNTRY,
                "count": 0,
                "data": [],
                "cached": False,
                "location": location,
            }

        result = self.get_country_rankings(location.country)
        return {
            "success": True,
            "level": LocationLevel.COUNTRY,
            "count": result["count"],
            "data": result["data"],
            "cached": result["cached"],
            "cache_age_seconds": result["cache_age_seconds"],
            "location": location,
        }

    def _query(self, level: LocationLevel, location: LocationQuery) -> Dict[str, Any]:
        query_filter = self.planner.plan(level, location)
        if query_filter is None:
            return {"count": 0, "data": []}
        rows = self.planner.execute(self.db, query_filter)
        return self.planner.interpret(rows)
