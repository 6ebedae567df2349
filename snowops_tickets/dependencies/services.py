from __future__ import annotations

from collections.abc import AsyncIterator
from typing import Annotated

from fastapi import Depends, HTTPException, Request
from sqlalchemy.ext.asyncio import AsyncSession

from snowops_tickets.tickets.assignments import AssignmentService
from snowops_tickets.tickets.repository import AssignmentRepository, TicketRepository, TripRepository
from snowops_tickets.tickets.service import TicketService
from snowops_tickets.tickets.trips import TripService


async def get_db_session(request: Request) -> AsyncIterator[AsyncSession]:
    """Open one session and one transaction for the duration of the request."""

    factory = getattr(request.app.state, "db_session_factory", None)
    if factory is None:
        raise HTTPException(status_code=503, detail="Database is not configured")
    async with factory() as session:
        async with session.begin():
            yield session


SessionDep = Annotated[AsyncSession, Depends(get_db_session)]


async def get_ticket_service(session: SessionDep) -> TicketService:
    return TicketService(TicketRepository(session), AssignmentRepository(session))


async def get_assignment_service(session: SessionDep) -> AssignmentService:
    return AssignmentService(AssignmentRepository(session), TicketRepository(session))


async def get_trip_service(session: SessionDep) -> TripService:
    return TripService(TripRepository(session), TicketRepository(session))


TicketServiceDep = Annotated[TicketService, Depends(get_ticket_service)]
AssignmentServiceDep = Annotated[AssignmentService, Depends(get_assignment_service)]
TripServiceDep = Annotated[TripService, Depends(get_trip_service)]
