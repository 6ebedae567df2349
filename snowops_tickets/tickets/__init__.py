"""Ticket lifecycle, access policy, assignments and trips."""

from .assignments import AssignmentService
from .errors import (
    AssignmentNotFoundError,
    InvalidInputError,
    InvalidTicketTransitionError,
    MissingOrganizationError,
    NotFoundError,
    PermissionDeniedError,
    PersistenceError,
    TicketNotFoundError,
    TicketServiceError,
    TripNotFoundError,
)
from .models import (
    CreateTripInput,
    DriverMarkStatus,
    Ticket,
    TicketAssignment,
    TicketListFilter,
    TicketStatusUpdate,
    Trip,
    TripStatus,
)
from .policy import TicketAccessPolicy
from .principal import Principal, Role
from .service import TicketService
from .state import TicketAction, TicketStateMachine, TicketStatus
from .trips import TripService

__all__ = [
    "AssignmentNotFoundError",
    "AssignmentService",
    "CreateTripInput",
    "DriverMarkStatus",
    "InvalidInputError",
    "InvalidTicketTransitionError",
    "MissingOrganizationError",
    "NotFoundError",
    "PermissionDeniedError",
    "PersistenceError",
    "Principal",
    "Role",
    "Ticket",
    "TicketAccessPolicy",
    "TicketAction",
    "TicketAssignment",
    "TicketListFilter",
    "TicketNotFoundError",
    "TicketService",
    "TicketServiceError",
    "TicketStateMachine",
    "TicketStatus",
    "TicketStatusUpdate",
    "Trip",
    "TripNotFoundError",
    "TripService",
    "TripStatus",
]
