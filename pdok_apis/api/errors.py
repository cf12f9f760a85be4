from fastapi import HTTPException

from pdok_apis.errors import (
    InvalidQueryError,
    NotFoundError,
    PdokError,
    UpstreamTimeoutError,
)


def to_http_exception(exc: PdokError) -> HTTPException:
    """Map a client error onto the HTTP status returned by this service."""
    if isinstance(exc, InvalidQueryError):
        return HTTPException(status_code=422, detail=str(exc))
    if isinstance(exc, NotFoundError):
        return HTTPException(status_code=404, detail=str(exc))
    if isinstance(exc, UpstreamTimeoutError):
        return HTTPException(status_code=504, detail=f"{exc.service} timed out")
    return HTTPException(status_code=502, detail=f"{exc.service} unavailable: {exc}")
