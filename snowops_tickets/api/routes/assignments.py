from __future__ import annotations

from datetime import datetime
from uuid import UUID

from fastapi import APIRouter, status
from pydantic import BaseModel, ConfigDict

from snowops_tickets.api.errors import to_http_exception
from snowops_tickets.dependencies.auth import CurrentPrincipal
from snowops_tickets.dependencies.services import AssignmentServiceDep
from snowops_tickets.tickets.errors import TicketServiceError
from snowops_tickets.tickets.models import DriverMarkStatus, TicketAssignment

router = APIRouter(prefix="/api/v1", tags=["assignments"])


class AssignmentCreateRequest(BaseModel):
    driver_id: UUID
    vehicle_id: UUID


class DriverMarkStatusRequest(BaseModel):
    status: str


class AssignmentResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    ticket_id: UUID
    driver_id: UUID
    vehicle_id: UUID
    assigned_at: datetime
    driver_mark_status: DriverMarkStatus
    is_active: bool
    created_at: datetime
    updated_at: datetime


def _to_response(assignment: TicketAssignment) -> AssignmentResponse:
    return AssignmentResponse.model_validate(assignment)


@router.post(
    "/tickets/{ticket_id}/assignments",
    response_model=AssignmentResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_assignment(
    ticket_id: UUID,
    payload: AssignmentCreateRequest,
    service: AssignmentServiceDep,
    principal: CurrentPrincipal,
) -> AssignmentResponse:
    try:
        assignment = await service.create_assignment(
            principal,
            ticket_id,
            driver_id=payload.driver_id,
            vehicle_id=payload.vehicle_id,
        )
    except TicketServiceError as exc:
        raise to_http_exception(exc) from exc
    return _to_response(assignment)


@router.get("/tickets/{ticket_id}/assignments", response_model=list[AssignmentResponse])
async def list_assignments(
    ticket_id: UUID,
    service: AssignmentServiceDep,
    principal: CurrentPrincipal,
) -> list[AssignmentResponse]:
    try:
        assignments = await service.list_by_ticket_id(principal, ticket_id)
    except TicketServiceError as exc:
        raise to_http_exception(exc) from exc
    return [_to_response(item) for item in assignments]


@router.delete("/assignments/{assignment_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_assignment(
    assignment_id: UUID,
    service: AssignmentServiceDep,
    principal: CurrentPrincipal,
) -> None:
    try:
        await service.delete_assignment(principal, assignment_id)
    except TicketServiceError as exc:
        raise to_http_exception(exc) from exc


@router.patch("/assignments/{assignment_id}/driver-mark-status", response_model=AssignmentResponse)
async def update_driver_mark_status(
    assignment_id: UUID,
    payload: DriverMarkStatusRequest,
    service: AssignmentServiceDep,
    principal: CurrentPrincipal,
) -> AssignmentResponse:
    try:
        assignment = await service.update_driver_mark_status(
            principal,
            assignment_id,
            DriverMarkStatus.parse(payload.status),
        )
    except TicketServiceError as exc:
        raise to_http_exception(exc) from exc
    return _to_response(assignment)
