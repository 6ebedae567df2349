from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import datetime, timezone
from uuid import UUID

from sqlalchemy import delete, exists, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from snowops_tickets.db.models import TicketAssignmentTable, TicketTable, TripTable

from .errors import PersistenceError
from .models import DriverMarkStatus, Ticket, TicketAssignment, TicketListFilter, Trip, TripStatus
from .state import TicketStatus

logger = logging.getLogger(__name__)


@contextmanager
def _storage_errors(operation: str) -> Iterator[None]:
    try:
        yield
    except SQLAlchemyError as exc:
        logger.exception("Storage failure while trying to %s", operation)
        raise PersistenceError(f"failed to {operation}") from exc


class TicketRepository:
    """Data access layer for ticket records.

    The repository never commits; the caller owns the transaction on the
    session it was constructed with.
    """

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def create(self, ticket: Ticket) -> Ticket:
        with _storage_errors("create ticket"):
            row = TicketTable(
                id=ticket.id,
                cleaning_area_id=ticket.cleaning_area_id,
                contractor_id=ticket.contractor_id,
                created_by_org_id=ticket.created_by_org_id,
                status=ticket.status.value,
                planned_start_at=ticket.planned_start_at,
                planned_end_at=ticket.planned_end_at,
                fact_start_at=ticket.fact_start_at,
                fact_end_at=ticket.fact_end_at,
                description=ticket.description,
                photo_url=ticket.photo_url,
                latitude=ticket.latitude,
                longitude=ticket.longitude,
                created_at=ticket.created_at,
                updated_at=ticket.updated_at,
            )
            self._session.add(row)
            await self._session.flush()
        return ticket

    async def get_by_id(self, ticket_id: UUID, *, for_update: bool = False) -> Ticket | None:
        statement = select(TicketTable).where(TicketTable.id == ticket_id)
        if for_update:
            statement = statement.with_for_update()
        with _storage_errors("load ticket"):
            result = await self._session.execute(statement)
            row = result.scalar_one_or_none()
        if row is None:
            return None
        return self._table_to_ticket(row)

    async def save(self, ticket: Ticket) -> Ticket | None:
        with _storage_errors("update ticket"):
            row = await self._session.get(TicketTable, ticket.id)
            if row is None:
                return None
            row.status = ticket.status.value
            row.fact_start_at = ticket.fact_start_at
            row.fact_end_at = ticket.fact_end_at
            row.description = ticket.description
            row.photo_url = ticket.photo_url
            row.latitude = ticket.latitude
            row.longitude = ticket.longitude
            row.updated_at = ticket.updated_at
            await self._session.flush()
        return ticket

    async def list(self, ticket_filter: TicketListFilter) -> list[Ticket]:
        statement = select(TicketTable)
        if ticket_filter.status is not None:
            statement = statement.where(TicketTable.status == ticket_filter.status.value)
        if ticket_filter.contractor_id is not None:
            statement = statement.where(TicketTable.contractor_id == ticket_filter.contractor_id)
        if ticket_filter.cleaning_area_id is not None:
            statement = statement.where(TicketTable.cleaning_area_id == ticket_filter.cleaning_area_id)
        if ticket_filter.created_by_org_id is not None:
            statement = statement.where(TicketTable.created_by_org_id == ticket_filter.created_by_org_id)
        if ticket_filter.driver_id is not None:
            assigned = exists().where(
                TicketAssignmentTable.ticket_id == TicketTable.id,
                TicketAssignmentTable.driver_id == ticket_filter.driver_id,
            )
            statement = statement.where(assigned)
        statement = statement.order_by(TicketTable.created_at.desc())

        with _storage_errors("list tickets"):
            result = await self._session.execute(statement)
            return [self._table_to_ticket(row) for row in result.scalars().all()]

    @staticmethod
    def _table_to_ticket(row: TicketTable) -> Ticket:
        return Ticket(
            id=row.id,
            cleaning_area_id=row.cleaning_area_id,
            contractor_id=row.contractor_id,
            created_by_org_id=row.created_by_org_id,
            status=TicketStatus(row.status),
            planned_start_at=_ensure_datetime(row.planned_start_at),
            planned_end_at=_ensure_datetime(row.planned_end_at),
            fact_start_at=_optional_datetime(row.fact_start_at),
            fact_end_at=_optional_datetime(row.fact_end_at),
            description=row.description or "",
            photo_url=row.photo_url,
            latitude=row.latitude,
            longitude=row.longitude,
            created_at=_ensure_datetime(row.created_at),
            updated_at=_ensure_datetime(row.updated_at),
        )


class AssignmentRepository:
    """Data access layer for driver/vehicle assignments."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def create(self, assignment: TicketAssignment) -> TicketAssignment:
        with _storage_errors("create assignment"):
            self._session.add(
                TicketAssignmentTable(
                    id=assignment.id,
                    ticket_id=assignment.ticket_id,
                    driver_id=assignment.driver_id,
                    vehicle_id=assignment.vehicle_id,
                    assigned_at=assignment.assigned_at,
                    driver_mark_status=assignment.driver_mark_status.value,
                    is_active=assignment.is_active,
                    created_at=assignment.created_at,
                    updated_at=assignment.updated_at,
                )
            )
            await self._session.flush()
        return assignment

    async def get_by_id(self, assignment_id: UUID) -> TicketAssignment | None:
        with _storage_errors("load assignment"):
            row = await self._session.get(TicketAssignmentTable, assignment_id)
        if row is None:
            return None
        return self._table_to_assignment(row)

    async def delete(self, assignment_id: UUID) -> bool:
        with _storage_errors("delete assignment"):
            result = await self._session.execute(
                delete(TicketAssignmentTable).where(TicketAssignmentTable.id == assignment_id)
            )
        return bool(result.rowcount)

    async def update_driver_mark_status(self, assignment_id: UUID, status: DriverMarkStatus) -> bool:
        with _storage_errors("update driver mark status"):
            result = await self._session.execute(
                update(TicketAssignmentTable)
                .where(TicketAssignmentTable.id == assignment_id)
                .values(driver_mark_status=status.value, updated_at=datetime.now(timezone.utc))
            )
        return bool(result.rowcount)

    async def list_by_ticket_id(self, ticket_id: UUID) -> list[TicketAssignment]:
        with _storage_errors("list assignments"):
            result = await self._session.execute(
                select(TicketAssignmentTable)
                .where(TicketAssignmentTable.ticket_id == ticket_id)
                .order_by(TicketAssignmentTable.assigned_at.asc())
            )
            return [self._table_to_assignment(row) for row in result.scalars().all()]

    async def exists_for_driver(self, ticket_id: UUID, driver_id: UUID) -> bool:
        with _storage_errors("check driver assignment"):
            result = await self._session.execute(
                select(
                    exists().where(
                        TicketAssignmentTable.ticket_id == ticket_id,
                        TicketAssignmentTable.driver_id == driver_id,
                    )
                )
            )
            return bool(result.scalar())

    @staticmethod
    def _table_to_assignment(row: TicketAssignmentTable) -> TicketAssignment:
        return TicketAssignment(
            id=row.id,
            ticket_id=row.ticket_id,
            driver_id=row.driver_id,
            vehicle_id=row.vehicle_id,
            assigned_at=_ensure_datetime(row.assigned_at),
            driver_mark_status=DriverMarkStatus(row.driver_mark_status),
            is_active=bool(row.is_active),
            created_at=_ensure_datetime(row.created_at),
            updated_at=_ensure_datetime(row.updated_at),
        )


class TripRepository:
    """Data access layer for recorded trips."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def create(self, trip: Trip) -> Trip:
        with _storage_errors("create trip"):
            self._session.add(
                TripTable(
                    id=trip.id,
                    ticket_id=trip.ticket_id,
                    ticket_assignment_id=trip.ticket_assignment_id,
                    driver_id=trip.driver_id,
                    vehicle_id=trip.vehicle_id,
                    camera_id=trip.camera_id,
                    polygon_id=trip.polygon_id,
                    vehicle_plate_number=trip.vehicle_plate_number,
                    detected_plate_number=trip.detected_plate_number,
                    entry_lpr_event_id=trip.entry_lpr_event_id,
                    exit_lpr_event_id=trip.exit_lpr_event_id,
                    entry_volume_event_id=trip.entry_volume_event_id,
                    exit_volume_event_id=trip.exit_volume_event_id,
                    detected_volume_entry=trip.detected_volume_entry,
                    detected_volume_exit=trip.detected_volume_exit,
                    entry_at=trip.entry_at,
                    exit_at=trip.exit_at,
                    status=trip.status.value,
                    created_at=trip.created_at,
                )
            )
            await self._session.flush()
        return trip

    async def get_by_id(self, trip_id: UUID) -> Trip | None:
        with _storage_errors("load trip"):
            row = await self._session.get(TripTable, trip_id)
        if row is None:
            return None
        return self._table_to_trip(row)

    async def list_by_ticket_id(self, ticket_id: UUID) -> list[Trip]:
        with _storage_errors("list trips"):
            result = await self._session.execute(
                select(TripTable).where(TripTable.ticket_id == ticket_id).order_by(TripTable.entry_at.desc())
            )
            return [self._table_to_trip(row) for row in result.scalars().all()]

    async def list_by_driver_id(self, driver_id: UUID, ticket_id: UUID | None = None) -> list[Trip]:
        statement = select(TripTable).where(TripTable.driver_id == driver_id)
        if ticket_id is not None:
            statement = statement.where(TripTable.ticket_id == ticket_id)
        with _storage_errors("list trips"):
            result = await self._session.execute(statement.order_by(TripTable.entry_at.desc()))
            return [self._table_to_trip(row) for row in result.scalars().all()]

    @staticmethod
    def _table_to_trip(row: TripTable) -> Trip:
        return Trip(
            id=row.id,
            ticket_id=row.ticket_id,
            ticket_assignment_id=row.ticket_assignment_id,
            driver_id=row.driver_id,
            vehicle_id=row.vehicle_id,
            camera_id=row.camera_id,
            polygon_id=row.polygon_id,
            vehicle_plate_number=row.vehicle_plate_number or "",
            detected_plate_number=row.detected_plate_number or "",
            entry_lpr_event_id=row.entry_lpr_event_id,
            exit_lpr_event_id=row.exit_lpr_event_id,
            entry_volume_event_id=row.entry_volume_event_id,
            exit_volume_event_id=row.exit_volume_event_id,
            detected_volume_entry=row.detected_volume_entry,
            detected_volume_exit=row.detected_volume_exit,
            entry_at=_ensure_datetime(row.entry_at),
            exit_at=_optional_datetime(row.exit_at),
            status=TripStatus(row.status),
            created_at=_ensure_datetime(row.created_at),
        )


def _ensure_datetime(value: datetime | None) -> datetime:
    if isinstance(value, datetime):
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value
    raise TypeError("Expected datetime value from database")


def _optional_datetime(value: datetime | None) -> datetime | None:
    if value is None:
        return None
    return _ensure_datetime(value)
