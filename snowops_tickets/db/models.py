"""SQLModel table definitions for the ticket service data layer."""

from __future__ import annotations

import uuid
from datetime import datetime, timezone

from sqlalchemy import Boolean, Column, DateTime, Float, ForeignKey, String, Text, Uuid
from sqlmodel import Field, SQLModel


def _utcnow() -> datetime:
    """Return a timezone aware UTC timestamp."""

    return datetime.now(timezone.utc)


class TicketTable(SQLModel, table=True):
    """Cleaning work orders."""

    __tablename__ = "tickets"

    id: uuid.UUID = Field(default_factory=uuid.uuid4, sa_column=Column(Uuid, primary_key=True))
    cleaning_area_id: uuid.UUID = Field(sa_column=Column(Uuid, nullable=False, index=True))
    contractor_id: uuid.UUID = Field(sa_column=Column(Uuid, nullable=False, index=True))
    created_by_org_id: uuid.UUID = Field(sa_column=Column(Uuid, nullable=False, index=True))
    status: str = Field(sa_column=Column(String(20), nullable=False, default="PLANNED"))
    planned_start_at: datetime = Field(sa_column=Column(DateTime(timezone=True), nullable=False))
    planned_end_at: datetime = Field(sa_column=Column(DateTime(timezone=True), nullable=False))
    fact_start_at: datetime | None = Field(default=None, sa_column=Column(DateTime(timezone=True), nullable=True))
    fact_end_at: datetime | None = Field(default=None, sa_column=Column(DateTime(timezone=True), nullable=True))
    description: str = Field(default="", sa_column=Column(Text, nullable=False, default=""))
    photo_url: str | None = Field(default=None, sa_column=Column(String(255), nullable=True))
    latitude: float | None = Field(default=None, sa_column=Column(Float, nullable=True))
    longitude: float | None = Field(default=None, sa_column=Column(Float, nullable=True))
    created_at: datetime = Field(default_factory=_utcnow, sa_column=Column(DateTime(timezone=True), nullable=False))
    updated_at: datetime = Field(default_factory=_utcnow, sa_column=Column(DateTime(timezone=True), nullable=False))


class TicketAssignmentTable(SQLModel, table=True):
    """Driver and vehicle bindings to tickets."""

    __tablename__ = "ticket_assignments"

    id: uuid.UUID = Field(default_factory=uuid.uuid4, sa_column=Column(Uuid, primary_key=True))
    ticket_id: uuid.UUID = Field(
        sa_column=Column(Uuid, ForeignKey("tickets.id"), nullable=False, index=True)
    )
    driver_id: uuid.UUID = Field(sa_column=Column(Uuid, nullable=False, index=True))
    vehicle_id: uuid.UUID = Field(sa_column=Column(Uuid, nullable=False, index=True))
    assigned_at: datetime = Field(default_factory=_utcnow, sa_column=Column(DateTime(timezone=True), nullable=False))
    driver_mark_status: str = Field(sa_column=Column(String(20), nullable=False, default="NOT_STARTED"))
    is_active: bool = Field(default=True, sa_column=Column(Boolean, nullable=False, default=True))
    created_at: datetime = Field(default_factory=_utcnow, sa_column=Column(DateTime(timezone=True), nullable=False))
    updated_at: datetime = Field(default_factory=_utcnow, sa_column=Column(DateTime(timezone=True), nullable=False))


class TripTable(SQLModel, table=True):
    """Vehicle entry/exit events reported by cameras and volume sensors."""

    __tablename__ = "trips"

    id: uuid.UUID = Field(default_factory=uuid.uuid4, sa_column=Column(Uuid, primary_key=True))
    ticket_id: uuid.UUID | None = Field(
        default=None, sa_column=Column(Uuid, ForeignKey("tickets.id"), nullable=True, index=True)
    )
    ticket_assignment_id: uuid.UUID | None = Field(
        default=None,
        sa_column=Column(Uuid, ForeignKey("ticket_assignments.id", ondelete="SET NULL"), nullable=True, index=True),
    )
    driver_id: uuid.UUID | None = Field(default=None, sa_column=Column(Uuid, nullable=True, index=True))
    vehicle_id: uuid.UUID | None = Field(default=None, sa_column=Column(Uuid, nullable=True, index=True))
    camera_id: uuid.UUID | None = Field(default=None, sa_column=Column(Uuid, nullable=True))
    polygon_id: uuid.UUID | None = Field(default=None, sa_column=Column(Uuid, nullable=True))
    vehicle_plate_number: str = Field(default="", sa_column=Column(String(32), nullable=False, default=""))
    detected_plate_number: str = Field(default="", sa_column=Column(String(32), nullable=False, default=""))
    entry_lpr_event_id: uuid.UUID | None = Field(default=None, sa_column=Column(Uuid, nullable=True))
    exit_lpr_event_id: uuid.UUID | None = Field(default=None, sa_column=Column(Uuid, nullable=True))
    entry_volume_event_id: uuid.UUID | None = Field(default=None, sa_column=Column(Uuid, nullable=True))
    exit_volume_event_id: uuid.UUID | None = Field(default=None, sa_column=Column(Uuid, nullable=True))
    detected_volume_entry: float | None = Field(default=None, sa_column=Column(Float, nullable=True))
    detected_volume_exit: float | None = Field(default=None, sa_column=Column(Float, nullable=True))
    entry_at: datetime = Field(sa_column=Column(DateTime(timezone=True), nullable=False, index=True))
    exit_at: datetime | None = Field(default=None, sa_column=Column(DateTime(timezone=True), nullable=True))
    status: str = Field(sa_column=Column(String(32), nullable=False))
    created_at: datetime = Field(default_factory=_utcnow, sa_column=Column(DateTime(timezone=True), nullable=False))
