from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from uuid import UUID, uuid4

from snowops_tickets.core.logging import ticket_span

from .errors import AssignmentNotFoundError, TicketNotFoundError
from .models import DriverMarkStatus, TicketAssignment
from .policy import TicketAccessPolicy
from .principal import Principal
from .repository import AssignmentRepository, TicketRepository
from .service import stamp_transition
from .state import TicketStateMachine, TicketStatus

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class AssignmentService:
    """Driver/vehicle assignments and the driver-reported progress on them."""

    assignments: AssignmentRepository
    tickets: TicketRepository
    policy: TicketAccessPolicy = field(default_factory=TicketAccessPolicy)

    async def create_assignment(
        self,
        principal: Principal,
        ticket_id: UUID,
        *,
        driver_id: UUID,
        vehicle_id: UUID,
    ) -> TicketAssignment:
        self.policy.ensure_can_manage_assignments(principal)
        ticket = await self.tickets.get_by_id(ticket_id)
        if ticket is None:
            raise TicketNotFoundError(f"Ticket {ticket_id} not found")
        self.policy.ensure_can_manage_assignments(principal, ticket)

        now = datetime.now(timezone.utc)
        assignment = TicketAssignment(
            id=uuid4(),
            ticket_id=ticket.id,
            driver_id=driver_id,
            vehicle_id=vehicle_id,
            assigned_at=now,
            driver_mark_status=DriverMarkStatus.NOT_STARTED,
            is_active=True,
            created_at=now,
            updated_at=now,
        )
        created = await self.assignments.create(assignment)
        logger.info("Assignment %s created on ticket %s", created.id, ticket_id)
        return created

    async def delete_assignment(self, principal: Principal, assignment_id: UUID) -> None:
        self.policy.ensure_can_manage_assignments(principal)
        assignment = await self.assignments.get_by_id(assignment_id)
        if assignment is None:
            raise AssignmentNotFoundError(f"Assignment {assignment_id} not found")

        ticket = await self.tickets.get_by_id(assignment.ticket_id)
        if ticket is None:
            raise TicketNotFoundError(f"Ticket of assignment {assignment_id} not found")
        self.policy.ensure_can_manage_assignments(principal, ticket)

        if not await self.assignments.delete(assignment_id):
            raise AssignmentNotFoundError(f"Assignment {assignment_id} not found")
        logger.info("Assignment %s deleted", assignment_id)

    async def update_driver_mark_status(
        self,
        principal: Principal,
        assignment_id: UUID,
        status: DriverMarkStatus,
    ) -> TicketAssignment:
        self.policy.ensure_can_mark_assignments(principal)

        assignment = await self.assignments.get_by_id(assignment_id)
        if assignment is None:
            raise AssignmentNotFoundError(f"Assignment {assignment_id} not found")
        self.policy.ensure_owns_assignment(principal, assignment)

        if not await self.assignments.update_driver_mark_status(assignment_id, status):
            raise AssignmentNotFoundError(f"Assignment {assignment_id} not found")

        if status is DriverMarkStatus.IN_WORK:
            await self._start_ticket(assignment)

        updated = await self.assignments.get_by_id(assignment_id)
        if updated is None:
            raise AssignmentNotFoundError(f"Assignment {assignment_id} not found")
        return updated

    async def list_by_ticket_id(self, principal: Principal, ticket_id: UUID) -> list[TicketAssignment]:
        ticket = await self.tickets.get_by_id(ticket_id)
        if ticket is None:
            raise TicketNotFoundError(f"Ticket {ticket_id} not found")
        self.policy.ensure_ticket_visible(principal, ticket)

        assignments = await self.assignments.list_by_ticket_id(ticket.id)
        if principal.is_driver():
            driver_id = principal.require_driver_id()
            return [item for item in assignments if item.driver_id == driver_id]
        return assignments

    async def _start_ticket(self, assignment: TicketAssignment) -> None:
        """Move a planned ticket into work the first time a driver reports IN_WORK."""

        with ticket_span("auto_start", id=assignment.ticket_id, assignment=assignment.id) as span:
            ticket = await self.tickets.get_by_id(assignment.ticket_id, for_update=True)
            if ticket is None:
                raise TicketNotFoundError(f"Ticket of assignment {assignment.id} not found")
            span.set_attribute("ticket.status.from", ticket.status.value)
            if ticket.status is not TicketStatus.PLANNED or ticket.fact_start_at is not None:
                return

            TicketStateMachine.assert_transition(ticket.status, TicketStatus.IN_PROGRESS)
            started = stamp_transition(ticket, TicketStatus.IN_PROGRESS, datetime.now(timezone.utc))
            await self.tickets.save(started)
            span.set_attribute("ticket.status.to", TicketStatus.IN_PROGRESS.value)
            logger.info("Ticket started automatically by driver mark")
