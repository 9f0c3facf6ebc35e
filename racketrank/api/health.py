from datetime import datetime, timezone

from fastapi import APIRouter

from racketrank.schemas.rankings import HealthResponse

router = APIRouter(tags=["health"])


@router.get("/health", response_model=HealthResponse)
def health():
    return HealthResponse(
        status="ok",
        message="RacketRank API is running",
        timestamp=datetime.now(timezone.utc)
    )
