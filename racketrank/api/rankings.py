"""
Rankings API endpoints.
"""
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from racketrank.api.deps import get_client_ip, get_db
from racketrank.schemas.location import Coordinates, LocationTriple
from racketrank.schemas.rankings import CountryRankingsResponse, LocationRankingsResponse
from racketrank.services.geo_resolver import GeoResolver
from racketrank.services.leaderboard_service import LeaderboardCacheService

router = APIRouter(
    tags=["rankings"],
    responses={400: {"description": "Missing or invalid location"}}
)


@router.get("/rankings")
def get_rankings(
        level: Optional[str] = Query(None, description="district, city or country"),
        district: Optional[str] = Query(None),
        city: Optional[str] = Query(None),
        country: Optional[str] = Query(None, description="Country name in any supported spelling"),
        lat: Optional[str] = Query(None, description="Latitude"),
        lng: Optional[str] = Query(None, description="Longitude"),
        client_ip: Optional[str] = Depends(get_client_ip),
        db: Session = Depends(get_db)
):
    """
    Get the top rated players for a location.

    Without `level` this is the country leaderboard: `country` is required,
    results are the top 10 and are cached per country for two hours.

    With `level` (district, city or country) the matching field is used as a
    filter. District and city may be resolved from `lat`/`lng` when no location
    is given. A location that resolves to "Unknown" yields an empty list.
    """
    service = LeaderboardCacheService(db)
    coordinates = Coordinates.parse(lat, lng)

    if level is None:
        return CountryRankingsResponse(**service.get_country_rankings(country))

    return LocationRankingsResponse(**service.get_rankings(
        level,
        district=district,
        city=city,
        country=country,
        coordinates=coordinates,
        client_ip=client_ip,
    ))


@router.get("/location", response_model=LocationTriple)
def resolve_location(
        lat: Optional[str] = Query(None, description="Latitude"),
        lng: Optional[str] = Query(None, description="Longitude"),
        country: Optional[str] = Query(None, description="Previously detected country"),
        client_ip: Optional[str] = Depends(get_client_ip),
        db: Session = Depends(get_db)
):
    """
    Resolve the caller's district, city and country.

    Uses coordinates when given, the client IP otherwise. Fields that cannot
    be resolved are "Unknown".
    """
    return GeoResolver(db).resolve(
        coordinates=Coordinates.parse(lat, lng),
        client_ip=client_ip,
        country_hint=country,
    )
