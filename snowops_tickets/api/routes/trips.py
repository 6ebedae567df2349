from __future__ import annotations

from datetime import datetime
from uuid import UUID

from fastapi import APIRouter
from pydantic import BaseModel, ConfigDict

from snowops_tickets.api.errors import to_http_exception
from snowops_tickets.dependencies.auth import CurrentPrincipal
from snowops_tickets.dependencies.services import TripServiceDep
from snowops_tickets.tickets.errors import TicketServiceError
from snowops_tickets.tickets.models import Trip, TripStatus

router = APIRouter(prefix="/api/v1", tags=["trips"])


class TripResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    ticket_id: UUID | None
    ticket_assignment_id: UUID | None
    driver_id: UUID | None
    vehicle_id: UUID | None
    camera_id: UUID | None
    polygon_id: UUID | None
    vehicle_plate_number: str
    detected_plate_number: str
    entry_lpr_event_id: UUID | None
    exit_lpr_event_id: UUID | None
    entry_volume_event_id: UUID | None
    exit_volume_event_id: UUID | None
    detected_volume_entry: float | None
    detected_volume_exit: float | None
    entry_at: datetime
    exit_at: datetime | None
    status: TripStatus
    created_at: datetime


def _to_response(trip: Trip) -> TripResponse:
    return TripResponse.model_validate(trip)


@router.get("/tickets/{ticket_id}/trips", response_model=list[TripResponse])
async def list_ticket_trips(
    ticket_id: UUID,
    service: TripServiceDep,
    principal: CurrentPrincipal,
) -> list[TripResponse]:
    try:
        trips = await service.list_by_ticket_id(principal, ticket_id)
    except TicketServiceError as exc:
        raise to_http_exception(exc) from exc
    return [_to_response(trip) for trip in trips]


@router.get("/trips/{trip_id}", response_model=TripResponse)
async def get_trip(trip_id: UUID, service: TripServiceDep, principal: CurrentPrincipal) -> TripResponse:
    try:
        trip = await service.get_trip(principal, trip_id)
    except TicketServiceError as exc:
        raise to_http_exception(exc) from exc
    return _to_response(trip)
