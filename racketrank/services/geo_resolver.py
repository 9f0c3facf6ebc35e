"""
Best-effort resolution of a client's location to a district/city/country triple.
"""
import logging
from datetime import datetime, timedelta
from ipaddress import ip_address
from typing import Callable, Optional

from sqlalchemy.orm import Session

from racketrank.core.config import settings
from racketrank.core.country_names import UNKNOWN, is_known, normalize_country
from racketrank.core.exceptions import UpstreamProviderError
from racketrank.models.cache import CountryRankingsCache, GeoCache
from racketrank.schemas.location import Coordinates, LocationTriple
from racketrank.services import geo_providers
from racketrank.services.cache_layer import CacheLayer, utcnow

logger = logging.getLogger(__name__)


def _field(value) -> str:
    if value is None:
        return UNKNOWN
    value = str(value).strip()
    return value or UNKNOWN


def usable_ip(ip: Optional[str]) -> bool:
    """Only public addresses are worth sending to the IP locator."""
    if not ip:
        return False
    try:
        return ip_address(ip.strip()).is_global
    except ValueError:
        return False


class GeoResolver:
    """
    Resolve coordinates or an IP to a LocationTriple, in priority order:

    1. Country hint with a fresh country-level cache entry
    2. Fresh coordinate cache entry
    3. Reverse geocoder (result cached for GEO_CACHE_TTL_MINUTES)
    4. IP locator (not cached)
    5. All fields "Unknown"

    Provider failures are logged and skipped; resolve() never raises for them.
    """

    def __init__(
        self,
        db: Session,
        geocoder: geo_providers.ReverseGeocoder = None,
        locator: geo_providers.IPLocator = None,
        clock: Callable[[], datetime] = utcnow
    ):
        self.geocoder = geocoder or geo_providers.reverse_geocoder
        self.locator = locator or geo_providers.ip_locator
        self.geo_cache = CacheLayer(
            db, GeoCache, "cache_key",
            ttl=timedelta(minutes=settings.GEO_CACHE_TTL_MINUTES),
            clock=clock
        )
        self.country_cache = CacheLayer(
            db, CountryRankingsCache, "country",
            ttl=timedelta(minutes=settings.RANKINGS_CACHE_TTL_MINUTES),
            clock=clock
        )

    def resolve(
        self,
        coordinates: Optional[Coordinates] = None,
        client_ip: Optional[str] = None,
        country_hint: Optional[str] = None,
        country_mapper: Callable[[str], Optional[str]] = normalize_country
    ) -> LocationTriple:
        triple = (
            self._from_country_hint(country_hint)
            or self._from_coordinates(coordinates)
            or self._from_ip(client_ip)
        )
        if triple is None:
            logger.info("Location could not be resolved - using Unknown")
            return LocationTriple.unknown()

        if is_known(triple.country):
            triple = triple.model_copy(update={"country": country_mapper(triple.country) or UNKNOWN})
        return triple

    def _from_country_hint(self, country_hint: Optional[str]) -> Optional[LocationTriple]:
        if not is_known(country_hint):
            return None

        country = normalize_country(country_hint)
        entry = self.country_cache.get_fresh(country)
        if entry is None:
            return None

        logger.debug(f"Country hint '{country_hint}' matched cached country {country}")
        return LocationTriple(country=entry.country)

    def _from_coordinates(self, coordinates: Optional[Coordinates]) -> Optional[LocationTriple]:
        if coordinates is None:
            return None

        cached = self.geo_cache.get_fresh(coordinates.cache_key)
        if cached is not None:
            logger.debug(f"Geo cache hit for {coordinates.cache_key}")
            return LocationTriple(district=cached.district, city=cached.city, country=cached.country)

        try:
            address = self.geocoder.reverse(coordinates.latitude, coordinates.longitude)
        except UpstreamProviderError as e:
            logger.warning(f"Reverse geocoding failed, falling back: {e}")
            return None

        triple = LocationTriple(
            district=_field(address.get("town")),
            city=_field(address.get("province")),
            country=normalize_country(address.get("country")) or UNKNOWN,
        )
        self.geo_cache.upsert(
            coordinates.cache_key,
            district=triple.district,
            city=triple.city,
            country=triple.country,
            latitude=coordinates.latitude,
            longitude=coordinates.longitude,
        )
        logger.info(f"Resolved {coordinates.cache_key} -> {triple.district}, {triple.city}, {triple.country}")
        return triple

    def _from_ip(self, client_ip: Optional[str]) -> Optional[LocationTriple]:
        if not usable_ip(client_ip):
            return None

        try:
            data = self.locator.locate(client_ip.strip())
        except UpstreamProviderError as e:
            logger.warning(f"IP location failed: {e}")
            return None

        return LocationTriple(
            district=_field(data.get("city")),
            city=_field(data.get("region")),
            country=normalize_country(data.get("country_name")) or UNKNOWN,
        )
