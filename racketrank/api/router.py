"""
Router registration for the RacketRank API.
"""
from fastapi import FastAPI

from racketrank.api import health, rankings


def include_routers(app: FastAPI) -> None:
    """Include all API routers with the FastAPI application."""
    app.include_router(health.router, prefix="/api")
    app.include_router(rankings.router, prefix="/api")
