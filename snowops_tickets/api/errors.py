from __future__ import annotations

from fastapi import HTTPException, status

from snowops_tickets.tickets.errors import (
    InvalidInputError,
    InvalidTicketTransitionError,
    NotFoundError,
    PermissionDeniedError,
    PersistenceError,
    TicketServiceError,
)


def to_http_exception(exc: TicketServiceError) -> HTTPException:
    """Map a service failure onto the HTTP status callers expect."""

    if isinstance(exc, InvalidTicketTransitionError):
        return HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail={
                "error": str(exc),
                "current_status": exc.current.value,
                "target_status": exc.target.value,
            },
        )
    if isinstance(exc, InvalidInputError):
        return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))
    if isinstance(exc, PermissionDeniedError):
        return HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(exc))
    if isinstance(exc, NotFoundError):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc))
    if isinstance(exc, PersistenceError):
        return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(exc))
    return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="internal error")
