"""
Exception handlers for the RacketRank API.
"""
import logging
from fastapi import Request, FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from racketrank.core.config import settings
from racketrank.core.exceptions import (
    RankingsException, ClientInputError, ConfigurationError, StoreQueryError
)

logger = logging.getLogger(__name__)

CONFIGURATION_ERROR_MESSAGE = (
    "Profile store is not configured. Please set the DATABASE_URL environment variable."
)


def create_error_response(
        status_code: int, error: str, detail: str, error_code: str, request: Request
) -> JSONResponse:
    """Create a standardized error response."""
    return JSONResponse(
        status_code=status_code,
        content={
            "success": False,
            "error": error,
            "detail": detail,
            "error_code": error_code,
            "request_id": getattr(request.state, 'request_id', None)
        }
    )


async def client_input_error_handler(request: Request, exc: ClientInputError) -> JSONResponse:
    """Handle missing or invalid request parameters."""
    return create_error_response(400, "Invalid request", str(exc), "INVALID_REQUEST", request)


async def configuration_error_handler(request: Request, exc: ConfigurationError) -> JSONResponse:
    """Handle an unconfigured profile store."""
    logger.error(f"Rejected {request.url.path}: {exc}")
    return create_error_response(
        500, "Server configuration error", CONFIGURATION_ERROR_MESSAGE,
        "CONFIGURATION_ERROR", request
    )


async def store_query_error_handler(request: Request, exc: StoreQueryError) -> JSONResponse:
    """Handle profile store query failures."""
    logger.error(f"Profile store query failed: {exc}")
    return create_error_response(500, "Database error", str(exc), "DATABASE_ERROR", request)


async def rankings_exception_handler(request: Request, exc: RankingsException) -> JSONResponse:
    """Handle generic rankings exceptions."""
    return create_error_response(400, "Rankings error", str(exc), "RANKINGS_ERROR", request)


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Handle validation errors with better formatting."""
    errors = []
    for error in exc.errors():
        errors.append({
            "field": ".".join(str(x) for x in error["loc"][1:]),
            "message": error["msg"],
            "type": error["type"]
        })

    return JSONResponse(
        status_code=422,
        content={
            "success": False,
            "detail": "Validation error",
            "errors": errors,
            "error_code": "VALIDATION_ERROR",
            "request_id": getattr(request.state, 'request_id', None)
        }
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Handle generic HTTP exceptions."""
    return create_error_response(
        exc.status_code, "HTTP error", exc.detail, f"HTTP_{exc.status_code}", request
    )


async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle unexpected exceptions."""
    logger.error(f"Unexpected error: {exc}", exc_info=True)

    # Don't expose internal errors in production
    if settings.DEBUG:
        detail = str(exc)
    else:
        detail = "An unexpected error occurred"

    return create_error_response(500, "Internal server error", detail, "INTERNAL_ERROR", request)


def register_exception_handlers(app: FastAPI) -> None:
    """Register all exception handlers with the FastAPI app."""
    app.add_exception_handler(ClientInputError, client_input_error_handler)
    app.add_exception_handler(ConfigurationError, configuration_error_handler)
    app.add_exception_handler(StoreQueryError, store_query_error_handler)
    app.add_exception_handler(RankingsException, rankings_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, general_exception_handler)
