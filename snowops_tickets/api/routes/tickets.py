from __future__ import annotations

from datetime import datetime
from uuid import UUID

from fastapi import APIRouter, Query, status
from pydantic import AwareDatetime, BaseModel, ConfigDict, Field

from snowops_tickets.api.errors import to_http_exception
from snowops_tickets.dependencies.auth import CurrentPrincipal
from snowops_tickets.dependencies.services import TicketServiceDep
from snowops_tickets.tickets.errors import TicketServiceError
from snowops_tickets.tickets.models import Ticket, TicketListFilter, TicketStatusUpdate
from snowops_tickets.tickets.state import TicketStatus

router = APIRouter(prefix="/api/v1", tags=["tickets"])


class TicketCreateRequest(BaseModel):
    cleaning_area_id: UUID
    contractor_id: UUID
    planned_start_at: AwareDatetime
    planned_end_at: AwareDatetime
    description: str | None = Field(default=None)


class TicketStatusUpdateRequest(BaseModel):
    status: str | None = Field(default=None)
    action: str | None = Field(default=None)
    photo_url: str | None = Field(default=None, max_length=255)
    latitude: float | None = Field(default=None, ge=-90, le=90)
    longitude: float | None = Field(default=None, ge=-180, le=180)


class TicketResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    cleaning_area_id: UUID
    contractor_id: UUID
    created_by_org_id: UUID
    status: TicketStatus
    planned_start_at: datetime
    planned_end_at: datetime
    fact_start_at: datetime | None
    fact_end_at: datetime | None
    description: str
    photo_url: str | None
    latitude: float | None
    longitude: float | None
    created_at: datetime
    updated_at: datetime


def _to_response(ticket: Ticket) -> TicketResponse:
    return TicketResponse.model_validate(ticket)


@router.post("/tickets", response_model=TicketResponse, status_code=status.HTTP_201_CREATED)
async def create_ticket(
    payload: TicketCreateRequest,
    service: TicketServiceDep,
    principal: CurrentPrincipal,
) -> TicketResponse:
    try:
        ticket = await service.create_ticket(
            principal,
            cleaning_area_id=payload.cleaning_area_id,
            contractor_id=payload.contractor_id,
            planned_start_at=payload.planned_start_at,
            planned_end_at=payload.planned_end_at,
            description=payload.description,
        )
    except TicketServiceError as exc:
        raise to_http_exception(exc) from exc
    return _to_response(ticket)


async def list_tickets(
    service: TicketServiceDep,
    principal: CurrentPrincipal,
    status_filter: str | None = Query(default=None, alias="status"),
    contractor_id: UUID | None = Query(default=None),
    cleaning_area_id: UUID | None = Query(default=None),
) -> list[TicketResponse]:
    try:
        ticket_filter = TicketListFilter(
            status=TicketStatus.parse(status_filter) if status_filter and status_filter.strip() else None,
            contractor_id=contractor_id,
            cleaning_area_id=cleaning_area_id,
        )
        tickets = await service.list_tickets(principal, ticket_filter)
    except TicketServiceError as exc:
        raise to_http_exception(exc) from exc
    return [_to_response(ticket) for ticket in tickets]


router.add_api_route("/tickets", list_tickets, methods=["GET"], response_model=list[TicketResponse])
for scope in ("akimat", "too", "contractor", "driver"):
    router.add_api_route(
        f"/{scope}/tickets",
        list_tickets,
        methods=["GET"],
        response_model=list[TicketResponse],
        name=f"list_{scope}_tickets",
    )


@router.get("/tickets/{ticket_id}", response_model=TicketResponse)
async def get_ticket(ticket_id: UUID, service: TicketServiceDep, principal: CurrentPrincipal) -> TicketResponse:
    try:
        ticket = await service.get_ticket(principal, ticket_id)
    except TicketServiceError as exc:
        raise to_http_exception(exc) from exc
    return _to_response(ticket)


@router.patch("/tickets/{ticket_id}/status", response_model=TicketResponse)
async def update_ticket_status(
    ticket_id: UUID,
    payload: TicketStatusUpdateRequest,
    service: TicketServiceDep,
    principal: CurrentPrincipal,
) -> TicketResponse:
    try:
        ticket = await service.update_status(
            principal,
            ticket_id,
            TicketStatusUpdate(
                status=payload.status,
                action=payload.action,
                photo_url=payload.photo_url,
                latitude=payload.latitude,
                longitude=payload.longitude,
            ),
        )
    except TicketServiceError as exc:
        raise to_http_exception(exc) from exc
    return _to_response(ticket)
