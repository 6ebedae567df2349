from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from uuid import UUID, uuid4

from snowops_tickets.core.logging import ticket_span

from .errors import InvalidTicketTransitionError, TicketNotFoundError
from .models import Ticket, TicketListFilter, TicketStatusUpdate
from .policy import TicketAccessPolicy
from .principal import Principal
from .repository import AssignmentRepository, TicketRepository
from .state import TicketStateMachine, TicketStatus, resolve_target_status

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def stamp_transition(ticket: Ticket, target: TicketStatus, now: datetime) -> Ticket:
    """Return ``ticket`` moved to ``target`` with fact timestamps filled in.

    ``fact_start_at`` is only set on PLANNED -> IN_PROGRESS and ``fact_end_at``
    only on IN_PROGRESS -> COMPLETED, each at most once.
    """

    changes: dict[str, object] = {"status": target, "updated_at": now}
    if ticket.status is TicketStatus.PLANNED and target is TicketStatus.IN_PROGRESS and ticket.fact_start_at is None:
        changes["fact_start_at"] = now
    if ticket.status is TicketStatus.IN_PROGRESS and target is TicketStatus.COMPLETED and ticket.fact_end_at is None:
        changes["fact_end_at"] = now
    return replace(ticket, **changes)


@dataclass(slots=True)
class TicketService:
    """High level orchestration for ticket lifecycle operations."""

    repository: TicketRepository
    assignments: AssignmentRepository
    policy: TicketAccessPolicy = field(default_factory=TicketAccessPolicy)

    async def create_ticket(
        self,
        principal: Principal,
        *,
        cleaning_area_id: UUID,
        contractor_id: UUID,
        planned_start_at: datetime,
        planned_end_at: datetime,
        description: str | None = None,
    ) -> Ticket:
        self.policy.ensure_can_create_ticket(principal)
        now = _utcnow()
        ticket = Ticket(
            id=uuid4(),
            cleaning_area_id=cleaning_area_id,
            contractor_id=contractor_id,
            created_by_org_id=principal.require_org_id(),
            status=TicketStateMachine.initial_state(),
            planned_start_at=planned_start_at,
            planned_end_at=planned_end_at,
            description=(description or "").strip(),
            created_at=now,
            updated_at=now,
        )
        created = await self.repository.create(ticket)
        logger.info("Ticket %s created by %s", created.id, principal.role.value)
        return created

    async def get_ticket(self, principal: Principal, ticket_id: UUID) -> Ticket:
        ticket = await self.repository.get_by_id(ticket_id)
        if ticket is None:
            raise TicketNotFoundError(f"Ticket {ticket_id} not found")
        await self._ensure_readable(principal, ticket)
        return ticket

    async def list_tickets(self, principal: Principal, ticket_filter: TicketListFilter | None = None) -> list[Ticket]:
        scoped = self.policy.scope_list_filter(principal, ticket_filter or TicketListFilter())
        return await self.repository.list(scoped)

    async def update_status(self, principal: Principal, ticket_id: UUID, update: TicketStatusUpdate) -> Ticket:
        with ticket_span("update_status", id=ticket_id, role=principal.role.value) as span:
            target = resolve_target_status(update.status, update.action)
            span.set_attribute("ticket.status.to", target.value)
            self.policy.ensure_can_set_status(principal, target)

            ticket = await self.repository.get_by_id(ticket_id, for_update=True)
            if ticket is None:
                raise TicketNotFoundError(f"Ticket {ticket_id} not found")
            span.set_attribute("ticket.status.from", ticket.status.value)
            await self._ensure_readable(principal, ticket)

            try:
                TicketStateMachine.assert_transition(ticket.status, target)
            except InvalidTicketTransitionError:
                logger.warning("Rejected transition %s -> %s", ticket.status.value, target.value)
                raise

            updated = stamp_transition(ticket, target, _utcnow())
            if update.photo_url is not None:
                updated.photo_url = update.photo_url
            if update.latitude is not None:
                updated.latitude = update.latitude
            if update.longitude is not None:
                updated.longitude = update.longitude

            saved = await self.repository.save(updated)
            if saved is None:
                raise TicketNotFoundError(f"Ticket {ticket_id} not found")
            logger.info("Ticket moved %s -> %s", ticket.status.value, target.value)
            return saved

    async def _ensure_readable(self, principal: Principal, ticket: Ticket) -> None:
        self.policy.ensure_ticket_visible(principal, ticket)
        if principal.is_driver():
            assigned = await self.assignments.exists_for_driver(ticket.id, principal.require_driver_id())
            self.policy.ensure_driver_assigned(principal, assigned)
