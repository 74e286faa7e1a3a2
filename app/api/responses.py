"""
Response helpers shared by the routers.
"""

from typing import Any

from fastapi import Response

from app.schemas.common import ErrorResponse

CACHE_HEADER = "X-Cache"

# Error envelopes documented on every protected router
ERROR_RESPONSES: dict[int | str, dict[str, Any]] = {
    400: {"model": ErrorResponse, "description": "Malformed request or validation failed"},
    401: {"model": ErrorResponse, "description": "Missing, invalid or expired token"},
    403: {"model": ErrorResponse, "description": "Role lacks the required permission"},
    404: {"model": ErrorResponse, "description": "Entity not found"},
    500: {"model": ErrorResponse, "description": "Internal server error"},
}


def mark_cache(response: Response, from_cache: bool) -> None:
    """Report whether a read was served from the cache."""
    response.headers[CACHE_HEADER] = "HIT" if from_cache else "MISS"
