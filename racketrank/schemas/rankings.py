from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import datetime

from racketrank.schemas.location import LocationLevel, LocationTriple


class PlayerEntry(BaseModel):
    id: int
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    rating: float
    region: Optional[str] = None
    city: Optional[str] = None
    country: Optional[str] = None
    avatar_url: Optional[str] = None

    class Config:
        from_attributes = True


class CountryRankingsResponse(BaseModel):
    success: bool = True
    country: str = Field(..., description="Canonical country name")
    count: int
    data: List[PlayerEntry]
    cached: bool
    cache_age_seconds: Optional[int] = Field(None, description="Seconds since the cached entry was written")


class LocationRankingsResponse(BaseModel):
    success: bool = True
    level: LocationLevel
    count: int
    data: List[PlayerEntry]
    cached: bool = False
    cache_age_seconds: Optional[int] = None
    location: Optional[LocationTriple] = None


class HealthResponse(BaseModel):
    status: str
    message: str
    timestamp: datetime
