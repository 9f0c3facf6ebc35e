"""
HTTP clients for the external location providers.

Both raise UpstreamProviderError for any failure (connection error, timeout,
non-OK status, malformed body) so callers only handle one exception type.
"""
import logging
from typing import Any, Dict

import requests

from racketrank.core.config import settings
from racketrank.core.exceptions import UpstreamProviderError

logger = logging.getLogger(__name__)


def _get_json(url: str, params: Dict[str, Any] = None) -> Dict[str, Any]:
    try:
        resp = requests.get(
            url,
            params=params,
            headers={"User-Agent": settings.PROVIDER_USER_AGENT},
            timeout=settings.PROVIDER_TIMEOUT_SECONDS,
        )
        resp.raise_for_status()
        data = resp.json()
    except requests.Timeout as e:
        raise UpstreamProviderError(f"Timed out calling {url}") from e
    except requests.RequestException as e:
        raise UpstreamProviderError(f"Request to {url} failed: {e}") from e
    except ValueError as e:
        raise UpstreamProviderError(f"Invalid JSON from {url}") from e

    if not isinstance(data, dict):
        raise UpstreamProviderError(f"Unexpected response shape from {url}")
    return data


class ReverseGeocoder:
    """Nominatim reverse geocoding: coordinates -> address fields."""

    def __init__(self, base_url: str = None):
        self.base_url = base_url or settings.REVERSE_GEOCODER_URL

    def reverse(self, latitude: float, longitude: float) -> Dict[str, Any]:
        """Return the "address" object for a coordinate pair."""
        data = _get_json(self.base_url, params={
            "format": "json",
            "lat": latitude,
            "lon": longitude,
            "addressdetails": 1,
        })

        address = data.get("address")
        if not isinstance(address, dict):
            # Nominatim answers 200 with {"error": ...} for oceans and the like
            raise UpstreamProviderError(
                f"No address for ({latitude}, {longitude}): {data.get('error', 'empty response')}"
            )

        logger.debug(f"Reverse geocoded ({latitude}, {longitude}) -> {address}")
        return address


class IPLocator:
    """ipapi.co lookup: client IP -> city/region/country_name."""

    def __init__(self, base_url: str = None):
        self.base_url = (base_url or settings.IP_LOCATOR_URL).rstrip("/")

    def locate(self, ip: str) -> Dict[str, Any]:
        data = _get_json(f"{self.base_url}/{ip}/json/")
        if data.get("error"):
            raise UpstreamProviderError(f"IP lookup failed for {ip}: {data.get('reason', 'unknown reason')}")
        return data


reverse_geocoder = ReverseGeocoder()
ip_locator = IPLocator()
