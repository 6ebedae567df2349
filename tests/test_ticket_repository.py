from __future__ import annotations

from datetime import datetime, timedelta, timezone
from uuid import uuid4

import pytest
from sqlalchemy import inspect as sa_inspect
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, async_sessionmaker
from unittest.mock import AsyncMock, MagicMock

from snowops_tickets.db.session import ensure_schema
from snowops_tickets.tickets.errors import PersistenceError
from snowops_tickets.tickets.models import DriverMarkStatus, TicketListFilter
from snowops_tickets.tickets.repository import AssignmentRepository, TicketRepository, TripRepository
from snowops_tickets.tickets.state import TicketStatus
from tests.factories import make_assignment, make_ticket, make_trip


@pytest.mark.asyncio
async def test_ensure_schema_creates_tables(engine: AsyncEngine):
    await ensure_schema(engine)

    async with engine.begin() as conn:
        tables = await conn.run_sync(lambda sync_conn: set(sa_inspect(sync_conn).get_table_names()))

    assert {"tickets", "ticket_assignments", "trips"} <= tables


@pytest.mark.asyncio
async def test_ticket_roundtrip_restores_utc(session_factory: async_sessionmaker):
    ticket = make_ticket()

    async with session_factory() as session:
        async with session.begin():
            await TicketRepository(session).create(ticket)

    async with session_factory() as session:
        loaded = await TicketRepository(session).get_by_id(ticket.id, for_update=True)

    assert loaded is not None
    assert loaded.status is TicketStatus.PLANNED
    assert loaded.planned_start_at.tzinfo is not None
    assert loaded.planned_start_at == ticket.planned_start_at
    assert loaded.fact_start_at is None


@pytest.mark.asyncio
async def test_save_updates_status_and_report(session_factory: async_sessionmaker):
    ticket = make_ticket()
    async with session_factory() as session:
        async with session.begin():
            repository = TicketRepository(session)
            await repository.create(ticket)
            ticket.status = TicketStatus.IN_PROGRESS
            ticket.fact_start_at = datetime.now(timezone.utc)
            ticket.photo_url = "https://cdn/photo.jpg"
            await repository.save(ticket)

    async with session_factory() as session:
        loaded = await TicketRepository(session).get_by_id(ticket.id)

    assert loaded.status is TicketStatus.IN_PROGRESS
    assert loaded.fact_start_at is not None
    assert loaded.photo_url == "https://cdn/photo.jpg"


@pytest.mark.asyncio
async def test_save_missing_ticket_returns_none(session_factory: async_sessionmaker):
    async with session_factory() as session:
        assert await TicketRepository(session).save(make_ticket()) is None


@pytest.mark.asyncio
async def test_list_applies_filters(session_factory: async_sessionmaker):
    contractor_id, org_id, driver_id = uuid4(), uuid4(), uuid4()
    mine = make_ticket(contractor_id=contractor_id, created_by_org_id=org_id)
    cancelled = make_ticket(status=TicketStatus.CANCELLED, contractor_id=contractor_id)
    foreign = make_ticket()

    async with session_factory() as session:
        async with session.begin():
            tickets = TicketRepository(session)
            for ticket in (mine, cancelled, foreign):
                await tickets.create(ticket)
            await AssignmentRepository(session).create(make_assignment(ticket_id=foreign.id, driver_id=driver_id))

    async with session_factory() as session:
        tickets = TicketRepository(session)
        by_contractor = await tickets.list(TicketListFilter(contractor_id=contractor_id))
        planned = await tickets.list(TicketListFilter(contractor_id=contractor_id, status=TicketStatus.PLANNED))
        by_org = await tickets.list(TicketListFilter(created_by_org_id=org_id))
        by_driver = await tickets.list(TicketListFilter(driver_id=driver_id))
        everything = await tickets.list(TicketListFilter())

    assert {t.id for t in by_contractor} == {mine.id, cancelled.id}
    assert [t.id for t in planned] == [mine.id]
    assert [t.id for t in by_org] == [mine.id]
    assert [t.id for t in by_driver] == [foreign.id]
    assert len(everything) == 3


@pytest.mark.asyncio
async def test_assignment_lifecycle(session_factory: async_sessionmaker):
    ticket = make_ticket()
    driver_id = uuid4()
    first = make_assignment(ticket_id=ticket.id, driver_id=driver_id)
    second = make_assignment(ticket_id=ticket.id)
    second.assigned_at = first.assigned_at + timedelta(minutes=5)

    async with session_factory() as session:
        async with session.begin():
            await TicketRepository(session).create(ticket)
            assignments = AssignmentRepository(session)
            await assignments.create(second)
            await assignments.create(first)

    async with session_factory() as session:
        async with session.begin():
            assignments = AssignmentRepository(session)
            listed = await assignments.list_by_ticket_id(ticket.id)
            assert [a.id for a in listed] == [first.id, second.id]
            assert await assignments.exists_for_driver(ticket.id, driver_id)
            assert not await assignments.exists_for_driver(ticket.id, uuid4())

            assert await assignments.update_driver_mark_status(first.id, DriverMarkStatus.IN_WORK)
            updated = await assignments.get_by_id(first.id)
            assert updated.driver_mark_status is DriverMarkStatus.IN_WORK

            assert await assignments.delete(second.id)
            assert not await assignments.delete(second.id)
            assert not await assignments.update_driver_mark_status(second.id, DriverMarkStatus.COMPLETED)
            assert await assignments.get_by_id(second.id) is None


@pytest.mark.asyncio
async def test_trip_listing_is_newest_first(session_factory: async_sessionmaker):
    ticket = make_ticket()
    driver_id = uuid4()
    older = make_trip(ticket_id=ticket.id, driver_id=driver_id)
    newer = make_trip(ticket_id=ticket.id)
    newer.entry_at = older.entry_at + timedelta(minutes=30)
    stray = make_trip(driver_id=driver_id)

    async with session_factory() as session:
        async with session.begin():
            await TicketRepository(session).create(ticket)
            trips = TripRepository(session)
            for trip in (older, newer, stray):
                await trips.create(trip)

    async with session_factory() as session:
        trips = TripRepository(session)
        by_ticket = await trips.list_by_ticket_id(ticket.id)
        by_driver = await trips.list_by_driver_id(driver_id)
        by_driver_on_ticket = await trips.list_by_driver_id(driver_id, ticket.id)
        loaded = await trips.get_by_id(stray.id)

    assert [t.id for t in by_ticket] == [newer.id, older.id]
    assert {t.id for t in by_driver} == {older.id, stray.id}
    assert [t.id for t in by_driver_on_ticket] == [older.id]
    assert loaded.ticket_id is None
    assert loaded.exit_at is None


@pytest.mark.asyncio
async def test_storage_errors_become_persistence_errors():
    session = MagicMock()
    session.execute = AsyncMock(side_effect=SQLAlchemyError("connection reset"))

    with pytest.raises(PersistenceError):
        await TicketRepository(session).get_by_id(uuid4())
