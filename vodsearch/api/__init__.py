"""API routes and schemas."""

from .errors import SearchAPIError, search_api_error_handler
from .routes import router
from .schemas import (
    ErrorResponse,
    HealthResponse,
    ResultSchema,
    SearchResponse,
)

__all__ = [
    "router",
    "SearchAPIError",
    "search_api_error_handler",
    "ErrorResponse",
    "HealthResponse",
    "ResultSchema",
    "SearchResponse",
]
