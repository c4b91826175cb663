"""API error type rendered as an {"error": ...} body."""

from fastapi import Request
from fastapi.responses import JSONResponse


class SearchAPIError(Exception):
    """Request-level failure with an HTTP status."""

    def __init__(self, status_code: int, message: str):
        super().__init__(message)
        self.status_code = status_code
        self.message = message


async def search_api_error_handler(request: Request, exc: SearchAPIError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})
