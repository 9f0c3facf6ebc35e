"""
Location types shared by the resolver, the query planner and the API.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field

from racketrank.core.country_names import UNKNOWN


class LocationLevel(str, Enum):
    DISTRICT = "district"
    CITY = "city"
    COUNTRY = "country"


@dataclass(frozen=True)
class Coordinates:
    """Coordinates exactly as the client sent them."""
    lat_text: str
    lng_text: str

    @classmethod
    def parse(cls, lat: Optional[str], lng: Optional[str]) -> Optional["Coordinates"]:
        """Build coordinates from query text; None unless both parts are valid floats."""
        if not lat or not lng:
            return None
        lat, lng = lat.strip(), lng.strip()
        try:
            latitude, longitude = float(lat), float(lng)
        except ValueError:
            return None
        if not (-90 <= latitude <= 90 and -180 <= longitude <= 180):
            return None
        return cls(lat_text=lat, lng_text=lng)

    @property
    def latitude(self) -> float:
        return float(self.lat_text)

    @property
    def longitude(self) -> float:
        return float(self.lng_text)

    @property
    def cache_key(self) -> str:
        # Not rounded: only identical coordinate text hits the same entry
        return f"{self.lat_text}-{self.lng_text}"


class LocationTriple(BaseModel):
    district: str = Field(UNKNOWN, description="District (store column: region)")
    city: str = Field(UNKNOWN, description="City or province")
    country: str = Field(UNKNOWN, description="Country")

    @classmethod
    def unknown(cls) -> "LocationTriple":
        return cls()


@dataclass(frozen=True)
class LocationQuery:
    """The location a single ranking request targets."""
    level: LocationLevel
    district: Optional[str] = None
    city: Optional[str] = None
    country: Optional[str] = None
    coordinates: Optional[Coordinates] = None

    def target(self) -> Optional[str]:
        """The field the level filters on."""
        return getattr(self, self.level.value)
