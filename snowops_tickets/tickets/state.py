from __future__ import annotations

from enum import Enum

from .errors import InvalidInputError, InvalidTicketTransitionError


class TicketStatus(str, Enum):
    """Supported states for a ticket's lifecycle."""

    PLANNED = "PLANNED"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"
    CLOSED = "CLOSED"
    CANCELLED = "CANCELLED"

    @classmethod
    def parse(cls, value: str) -> TicketStatus:
        try:
            return cls(value.strip().upper())
        except ValueError as exc:
            raise InvalidInputError("unknown status") from exc


class TicketAction(str, Enum):
    """Shorthand actions accepted alongside an explicit status."""

    MARK_IN_PROGRESS = "mark_in_progress"
    MARK_COMPLETED = "mark_completed"
    MARK_CLOSED = "mark_closed"
    CANCEL = "cancel"

    @classmethod
    def parse(cls, value: str) -> TicketAction:
        try:
            return cls(value.strip().lower())
        except ValueError as exc:
            raise InvalidInputError("unknown action") from exc

    @property
    def target_status(self) -> TicketStatus:
        return _ACTION_TARGETS[self]


_ACTION_TARGETS: dict[TicketAction, TicketStatus] = {
    TicketAction.MARK_IN_PROGRESS: TicketStatus.IN_PROGRESS,
    TicketAction.MARK_COMPLETED: TicketStatus.COMPLETED,
    TicketAction.MARK_CLOSED: TicketStatus.CLOSED,
    TicketAction.CANCEL: TicketStatus.CANCELLED,
}


class TicketStateMachine:
    """Validate ticket lifecycle transitions."""

    _TRANSITIONS: dict[TicketStatus, set[TicketStatus]] = {
        TicketStatus.PLANNED: {TicketStatus.IN_PROGRESS, TicketStatus.CANCELLED},
        TicketStatus.IN_PROGRESS: {TicketStatus.COMPLETED, TicketStatus.CANCELLED},
        TicketStatus.COMPLETED: {TicketStatus.CLOSED},
        TicketStatus.CLOSED: set(),
        TicketStatus.CANCELLED: set(),
    }

    @classmethod
    def initial_state(cls) -> TicketStatus:
        return TicketStatus.PLANNED

    @classmethod
    def is_terminal(cls, status: TicketStatus) -> bool:
        return not cls._TRANSITIONS.get(status)

    @classmethod
    def can_transition(cls, current: TicketStatus, new: TicketStatus) -> bool:
        if current == new:
            return True
        return new in cls._TRANSITIONS.get(current, set())

    @classmethod
    def assert_transition(cls, current: TicketStatus, new: TicketStatus) -> None:
        if not cls.can_transition(current, new):
            raise InvalidTicketTransitionError(current, new)


def resolve_target_status(status: str | None, action: str | None) -> TicketStatus:
    """Normalize the ``status``/``action`` pair of an update request.

    An explicit ``status`` takes precedence; ``action`` is only consulted when
    ``status`` is empty.
    """

    if status is not None and status.strip():
        return TicketStatus.parse(status)
    if action is not None and action.strip():
        return TicketAction.parse(action).target_status
    raise InvalidInputError("status or action must be provided")
