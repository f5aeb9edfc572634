"""
Response envelope helpers.

Every response body has the shape ``{success, data?, message?, error?}``.
"""

from typing import Any

from fastapi.responses import JSONResponse

from subtrack.domain.exceptions import RateLimitError, SubTrackError


def success_response(
    data: Any = None,
    message: str | None = None,
    status_code: int = 200,
) -> JSONResponse:
    """Build a successful envelope."""
    content: dict[str, Any] = {"success": True}
    if data is not None:
        content["data"] = data
    if message is not None:
        content["message"] = message
    return JSONResponse(status_code=status_code, content=content)


def error_response(error: SubTrackError) -> JSONResponse:
    """Build the failure envelope of a domain error."""
    headers: dict[str, str] = {}
    if isinstance(error, RateLimitError) and error.retry_after is not None:
        headers["Retry-After"] = str(error.retry_after)
    return JSONResponse(status_code=error.status_code, content=error.to_dict(), headers=headers)
