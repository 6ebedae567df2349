from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from datetime import datetime, timezone
from uuid import UUID, uuid4

from .errors import InvalidInputError, TicketNotFoundError, TripNotFoundError
from .models import CreateTripInput, Trip, TripStatus
from .policy import TicketAccessPolicy
from .principal import Principal
from .repository import TicketRepository, TripRepository

logger = logging.getLogger(__name__)

_ID_FIELDS = (
    "ticket_id",
    "ticket_assignment_id",
    "driver_id",
    "vehicle_id",
    "camera_id",
    "polygon_id",
    "entry_lpr_event_id",
    "exit_lpr_event_id",
    "entry_volume_event_id",
    "exit_volume_event_id",
)

_RFC3339 = re.compile(r"\d{4}-\d{2}-\d{2}[Tt ]\d{2}:\d{2}:\d{2}(\.\d+)?([Zz]|[+-]\d{2}:\d{2})")


def parse_uuid(name: str, value: str | None) -> UUID | None:
    if value is None:
        return None
    try:
        return UUID(value.strip())
    except ValueError as exc:
        raise InvalidInputError(f"invalid {name}") from exc


def parse_timestamp(name: str, value: str | None) -> datetime | None:
    """Parse an RFC 3339 date-time; the UTC offset is mandatory."""

    if value is None:
        return None
    raw = value.strip()
    if not _RFC3339.fullmatch(raw):
        raise InvalidInputError(f"invalid {name}: expected RFC 3339 date-time with offset")
    try:
        return datetime.fromisoformat(raw.upper().replace("Z", "+00:00"))
    except ValueError as exc:
        raise InvalidInputError(f"invalid {name}") from exc


@dataclass(slots=True)
class TripService:
    """Trips recorded from camera and volume-sensor events."""

    trips: TripRepository
    tickets: TicketRepository
    policy: TicketAccessPolicy = field(default_factory=TicketAccessPolicy)

    async def create_trip(self, data: CreateTripInput) -> Trip:
        ids = {name: parse_uuid(name, getattr(data, name)) for name in _ID_FIELDS}
        if not data.entry_at or not data.entry_at.strip():
            raise InvalidInputError("entry_at is required")
        entry_at = parse_timestamp("entry_at", data.entry_at)
        exit_at = parse_timestamp("exit_at", data.exit_at)
        status = TripStatus.parse(data.status)

        trip = Trip(
            id=uuid4(),
            entry_at=entry_at,
            exit_at=exit_at,
            status=status,
            vehicle_plate_number=data.vehicle_plate_number.strip(),
            detected_plate_number=data.detected_plate_number.strip(),
            detected_volume_entry=data.detected_volume_entry,
            detected_volume_exit=data.detected_volume_exit,
            created_at=datetime.now(timezone.utc),
            **ids,
        )
        created = await self.trips.create(trip)
        logger.info("Trip %s recorded with status %s", created.id, created.status.value)
        # Ticket status is not derived from trips; the driver mark is the only automatic transition.
        return created

    async def list_by_ticket_id(self, principal: Principal, ticket_id: UUID) -> list[Trip]:
        ticket = await self.tickets.get_by_id(ticket_id)
        if ticket is None:
            raise TicketNotFoundError(f"Ticket {ticket_id} not found")
        self.policy.ensure_ticket_visible(principal, ticket)

        if principal.is_driver():
            return await self.trips.list_by_driver_id(principal.require_driver_id(), ticket.id)
        return await self.trips.list_by_ticket_id(ticket.id)

    async def get_trip(self, principal: Principal, trip_id: UUID) -> Trip:
        trip = await self.trips.get_by_id(trip_id)
        if trip is None:
            raise TripNotFoundError(f"Trip {trip_id} not found")

        ticket = None
        if trip.ticket_id is not None:
            ticket = await self.tickets.get_by_id(trip.ticket_id)
            if ticket is None:
                raise TicketNotFoundError(f"Ticket of trip {trip_id} not found")
        self.policy.ensure_trip_visible(principal, trip, ticket)
        return trip
