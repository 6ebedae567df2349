"""Database models and utilities."""

from .models import TicketAssignmentTable, TicketTable, TripTable
from .session import check_connection, create_engine_from_settings, create_session_factory

__all__ = [
    "TicketAssignmentTable",
    "TicketTable",
    "TripTable",
    "check_connection",
    "create_engine_from_settings",
    "create_session_factory",
]
