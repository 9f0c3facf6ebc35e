from pydantic_settings import BaseSettings
import os

class Settings(BaseSettings):
    DATABASE_URL: str = os.getenv(
        "DATABASE_URL",
        "sqlite:///./racketrank.db"
    )
    DEBUG: bool = os.getenv("DEBUG", "True") == "True"

    # External location providers
    REVERSE_GEOCODER_URL: str = "https://nominatim.openstreetmap.org/reverse"
    IP_LOCATOR_URL: str = "https://ipapi.co"
    PROVIDER_USER_AGENT: str = "RacketRank/1.0"
    PROVIDER_TIMEOUT_SECONDS: float = 10.0

    # Cache lifetimes
    GEO_CACHE_TTL_MINUTES: int = 120
    RANKINGS_CACHE_TTL_MINUTES: int = 120

    # Result sizes
    COUNTRY_RANKINGS_LIMIT: int = 10
    LOCATION_RANKINGS_LIMIT: int = 100

    # Used by the rankings client and prefetch job
    API_BASE_URL: str = os.getenv("API_BASE_URL", "http://localhost:8000")

    class Config:
        env_file = ".env"

settings = Settings()
