from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from uuid import UUID

from .errors import InvalidInputError
from .state import TicketStatus


class DriverMarkStatus(str, Enum):
    """Driver-reported progress on an assignment."""

    NOT_STARTED = "NOT_STARTED"
    IN_WORK = "IN_WORK"
    COMPLETED = "COMPLETED"

    @classmethod
    def parse(cls, value: str) -> DriverMarkStatus:
        try:
            return cls(value.strip().upper())
        except ValueError as exc:
            raise InvalidInputError("unknown driver mark status") from exc


class TripStatus(str, Enum):
    """Outcome of matching a vehicle movement against assignments."""

    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"
    NO_ASSIGNMENT = "NO_ASSIGNMENT"
    PLATE_MISMATCH = "PLATE_MISMATCH"

    @classmethod
    def parse(cls, value: str) -> TripStatus:
        try:
            return cls(value.strip().upper())
        except ValueError as exc:
            raise InvalidInputError("unknown trip status") from exc


@dataclass(slots=True)
class Ticket:
    """Aggregate representing a cleaning work order."""

    id: UUID
    cleaning_area_id: UUID
    contractor_id: UUID
    created_by_org_id: UUID
    status: TicketStatus
    planned_start_at: datetime
    planned_end_at: datetime
    created_at: datetime
    updated_at: datetime
    fact_start_at: datetime | None = None
    fact_end_at: datetime | None = None
    description: str = ""
    photo_url: str | None = None
    latitude: float | None = None
    longitude: float | None = None


@dataclass(slots=True)
class TicketAssignment:
    """Binding of a driver and a vehicle to a ticket."""

    id: UUID
    ticket_id: UUID
    driver_id: UUID
    vehicle_id: UUID
    assigned_at: datetime
    driver_mark_status: DriverMarkStatus
    is_active: bool
    created_at: datetime
    updated_at: datetime


@dataclass(slots=True)
class Trip:
    """Recorded vehicle movement (entry/exit) optionally linked to a ticket."""

    id: UUID
    entry_at: datetime
    status: TripStatus
    created_at: datetime
    ticket_id: UUID | None = None
    ticket_assignment_id: UUID | None = None
    driver_id: UUID | None = None
    vehicle_id: UUID | None = None
    camera_id: UUID | None = None
    polygon_id: UUID | None = None
    vehicle_plate_number: str = ""
    detected_plate_number: str = ""
    entry_lpr_event_id: UUID | None = None
    exit_lpr_event_id: UUID | None = None
    entry_volume_event_id: UUID | None = None
    exit_volume_event_id: UUID | None = None
    detected_volume_entry: float | None = None
    detected_volume_exit: float | None = None
    exit_at: datetime | None = None


@dataclass(slots=True)
class TicketListFilter:
    """Optional filters applied when listing tickets."""

    status: TicketStatus | None = None
    contractor_id: UUID | None = None
    cleaning_area_id: UUID | None = None
    created_by_org_id: UUID | None = None
    driver_id: UUID | None = None


@dataclass(slots=True)
class TicketStatusUpdate:
    """Payload of a status update: target channel plus optional field report."""

    status: str | None = None
    action: str | None = None
    photo_url: str | None = None
    latitude: float | None = None
    longitude: float | None = None


@dataclass(slots=True)
class CreateTripInput:
    """Raw trip event as delivered by the detection pipeline."""

    entry_at: str
    status: str
    ticket_id: str | None = None
    ticket_assignment_id: str | None = None
    driver_id: str | None = None
    vehicle_id: str | None = None
    camera_id: str | None = None
    polygon_id: str | None = None
    vehicle_plate_number: str = ""
    detected_plate_number: str = ""
    entry_lpr_event_id: str | None = None
    exit_lpr_event_id: str | None = None
    entry_volume_event_id: str | None = None
    exit_volume_event_id: str | None = None
    detected_volume_entry: float | None = None
    detected_volume_exit: float | None = None
    exit_at: str | None = None
