from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .state import TicketStatus


class TicketServiceError(RuntimeError):
    """Base error for ticket service issues."""


class InvalidInputError(TicketServiceError):
    """Raised for malformed identifiers, timestamps, enum values or missing fields."""


class MissingOrganizationError(InvalidInputError):
    """Raised when an organization-scoped role has no organization id."""

    def __init__(self, message: str = "missing organization id") -> None:
        super().__init__(message)


class NotFoundError(TicketServiceError):
    """Raised when a referenced record does not exist."""


class TicketNotFoundError(NotFoundError):
    """Raised when a ticket could not be located."""


class AssignmentNotFoundError(NotFoundError):
    """Raised when a ticket assignment could not be located."""


class TripNotFoundError(NotFoundError):
    """Raised when a trip could not be located."""


class PermissionDeniedError(TicketServiceError):
    """Raised when the principal lacks the role or ownership for an operation."""


class InvalidTicketTransitionError(TicketServiceError):
    """Raised when attempting to transition to an invalid state."""

    def __init__(self, current: TicketStatus, target: TicketStatus) -> None:
        super().__init__(f"status transition from {current.value} to {target.value} is not allowed")
        self.current = current
        self.target = target


class PersistenceError(TicketServiceError):
    """Raised when the storage layer fails; never retried by the services."""
