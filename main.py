"""
Location-scoped player rankings for RacketRank.
"""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware

from racketrank.api.router import include_routers
from racketrank.core.config import settings
from racketrank.core.exception_handlers import register_exception_handlers
from racketrank.core.startup import initialize_database, shutdown_database

# Configure logging
logging.basicConfig(
    level=logging.INFO if not settings.DEBUG else logging.DEBUG,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


# Lifespan context manager for startup/shutdown events
@asynccontextmanager
async def lifespan(app: FastAPI):
    """Handle application lifecycle events."""
    # Startup
    logger.info("Starting RacketRank API...")
    initialize_database()

    yield

    # Shutdown
    logger.info("Shutting down RacketRank API...")
    shutdown_database()


# Create FastAPI application
app = FastAPI(
    title="RacketRank",
    description="""
    Player rankings scoped to the caller's district, city or country.
    """,
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
    lifespan=lifespan
)


CORS_ALLOW_METHODS = ["GET", "OPTIONS"]

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=CORS_ALLOW_METHODS,
    allow_headers=["*"],
)


# Registered last, so it wraps CORSMiddleware and sees preflights first
@app.middleware("http")
async def short_circuit_options(request: Request, call_next):
    """Answer every OPTIONS request with 200, preflight or not."""
    if request.method == "OPTIONS":
        return Response(status_code=200, headers={
            "Access-Control-Allow-Origin": "*",
            "Access-Control-Allow-Methods": ",".join(CORS_ALLOW_METHODS),
            "Access-Control-Allow-Headers": request.headers.get(
                "access-control-request-headers", "*"
            ),
        })
    return await call_next(request)


# Register exception handlers
register_exception_handlers(app)


# Include routers
include_routers(app)

# CLI entry point
if __name__ == "__main__":
    import uvicorn

    # Development server configuration
    uvicorn.run(
        "main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.DEBUG,
        log_level="debug" if settings.DEBUG else "info",
        access_log=True
    )
