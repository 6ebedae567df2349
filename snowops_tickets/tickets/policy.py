"""Role-based access rules for tickets and everything hanging off them."""

from __future__ import annotations

import logging
from dataclasses import replace

from .errors import PermissionDeniedError
from .models import Ticket, TicketAssignment, TicketListFilter, Trip
from .principal import Principal, Role
from .state import TicketStatus

logger = logging.getLogger(__name__)

_STATUS_ROLES: dict[TicketStatus, frozenset[Role]] = {
    TicketStatus.IN_PROGRESS: frozenset({Role.DRIVER, Role.CONTRACTOR_ADMIN}),
    TicketStatus.COMPLETED: frozenset({Role.DRIVER, Role.CONTRACTOR_ADMIN}),
    TicketStatus.CLOSED: frozenset({Role.TOO_ADMIN, Role.AKIMAT_ADMIN}),
    TicketStatus.CANCELLED: frozenset({Role.TOO_ADMIN, Role.AKIMAT_ADMIN}),
    TicketStatus.PLANNED: frozenset(Role),
}

_TICKET_CREATORS = frozenset({Role.TOO_ADMIN, Role.AKIMAT_ADMIN})


def _deny(principal: Principal, reason: str) -> PermissionDeniedError:
    logger.warning("Access denied for %s: %s", principal.role.value, reason)
    return PermissionDeniedError(reason)


class TicketAccessPolicy:
    """Decide what a principal may read or change.

    Visibility and the status role gate are separate guards. A status update
    has to pass both.
    """

    @staticmethod
    def ensure_can_create_ticket(principal: Principal) -> None:
        if principal.role not in _TICKET_CREATORS:
            raise _deny(principal, "only TOO or AKIMAT admin can create tickets")
        principal.require_org_id()

    @staticmethod
    def scope_list_filter(principal: Principal, requested: TicketListFilter) -> TicketListFilter:
        """Narrow a caller-supplied filter down to the principal's visible tickets."""

        if principal.is_akimat():
            return replace(requested)
        if principal.is_too():
            return replace(requested, created_by_org_id=principal.require_org_id())
        if principal.is_contractor():
            return replace(requested, contractor_id=principal.require_org_id())
        if principal.is_driver():
            return replace(requested, driver_id=principal.require_driver_id())
        raise _deny(principal, "role is not allowed")

    @staticmethod
    def ensure_ticket_visible(principal: Principal, ticket: Ticket) -> None:
        """Organization-level visibility check.

        Drivers only need a resolved driver id here; callers narrow driver
        access further by assignment or trip ownership.
        """

        if principal.is_akimat():
            return
        if principal.is_too():
            if ticket.created_by_org_id != principal.require_org_id():
                raise _deny(principal, "ticket was created by another organization")
            return
        if principal.is_contractor():
            if ticket.contractor_id != principal.require_org_id():
                raise _deny(principal, "ticket belongs to another contractor")
            return
        if principal.is_driver():
            principal.require_driver_id()
            return
        raise _deny(principal, "role is not allowed")

    @staticmethod
    def ensure_driver_assigned(principal: Principal, assigned: bool) -> None:
        if principal.is_driver() and not assigned:
            raise _deny(principal, "driver is not assigned to this ticket")

    @staticmethod
    def ensure_can_set_status(principal: Principal, target: TicketStatus) -> None:
        allowed = _STATUS_ROLES.get(target, frozenset())
        if principal.role not in allowed:
            names = " or ".join(sorted(role.value for role in allowed)) or "nobody"
            raise _deny(principal, f"only {names} can set status {target.value}")

    @staticmethod
    def ensure_can_manage_assignments(principal: Principal, ticket: Ticket | None = None) -> None:
        if not principal.is_contractor():
            raise _deny(principal, "only CONTRACTOR_ADMIN can manage assignments")
        if ticket is not None and ticket.contractor_id != principal.require_org_id():
            raise _deny(principal, "ticket belongs to another contractor")

    @staticmethod
    def ensure_can_mark_assignments(principal: Principal) -> None:
        if not principal.is_driver():
            raise _deny(principal, "only DRIVER can update driver mark status")
        principal.require_driver_id()

    @staticmethod
    def ensure_owns_assignment(principal: Principal, assignment: TicketAssignment) -> None:
        TicketAccessPolicy.ensure_can_mark_assignments(principal)
        if assignment.driver_id != principal.require_driver_id():
            raise _deny(principal, "assignment belongs to another driver")

    @staticmethod
    def ensure_trip_visible(principal: Principal, trip: Trip, ticket: Ticket | None) -> None:
        """Trip visibility follows the owning ticket; drivers must own the trip itself."""

        if principal.is_driver():
            if trip.driver_id != principal.require_driver_id():
                raise _deny(principal, "trip belongs to another driver")
            return
        if ticket is None:
            if principal.is_akimat():
                return
            raise _deny(principal, "trip is not linked to a ticket of this organization")
        TicketAccessPolicy.ensure_ticket_visible(principal, ticket)
