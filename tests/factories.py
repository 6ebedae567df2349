from __future__ import annotations

from datetime import datetime, timedelta, timezone
from uuid import UUID, uuid4

from snowops_tickets.tickets.models import DriverMarkStatus, Ticket, TicketAssignment, Trip, TripStatus
from snowops_tickets.tickets.state import TicketStatus


def make_ticket(
    *,
    status: TicketStatus = TicketStatus.PLANNED,
    contractor_id: UUID | None = None,
    created_by_org_id: UUID | None = None,
    fact_start_at: datetime | None = None,
) -> Ticket:
    now = datetime.now(timezone.utc)
    return Ticket(
        id=uuid4(),
        cleaning_area_id=uuid4(),
        contractor_id=contractor_id or uuid4(),
        created_by_org_id=created_by_org_id or uuid4(),
        status=status,
        planned_start_at=now,
        planned_end_at=now + timedelta(hours=8),
        created_at=now,
        updated_at=now,
        fact_start_at=fact_start_at,
    )


def make_assignment(
    *,
    ticket_id: UUID | None = None,
    driver_id: UUID | None = None,
    status: DriverMarkStatus = DriverMarkStatus.NOT_STARTED,
) -> TicketAssignment:
    now = datetime.now(timezone.utc)
    return TicketAssignment(
        id=uuid4(),
        ticket_id=ticket_id or uuid4(),
        driver_id=driver_id or uuid4(),
        vehicle_id=uuid4(),
        assigned_at=now,
        driver_mark_status=status,
        is_active=True,
        created_at=now,
        updated_at=now,
    )


def make_trip(*, ticket_id: UUID | None = None, driver_id: UUID | None = None) -> Trip:
    now = datetime.now(timezone.utc)
    return Trip(
        id=uuid4(),
        entry_at=now,
        status=TripStatus.IN_PROGRESS,
        created_at=now,
        ticket_id=ticket_id,
        driver_id=driver_id,
    )
