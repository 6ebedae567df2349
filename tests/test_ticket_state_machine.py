import itertools

import pytest

from snowops_tickets.tickets.errors import InvalidInputError, InvalidTicketTransitionError
from snowops_tickets.tickets.state import TicketAction, TicketStateMachine, TicketStatus, resolve_target_status

ALLOWED = {
    (TicketStatus.PLANNED, TicketStatus.IN_PROGRESS),
    (TicketStatus.PLANNED, TicketStatus.CANCELLED),
    (TicketStatus.IN_PROGRESS, TicketStatus.COMPLETED),
    (TicketStatus.IN_PROGRESS, TicketStatus.CANCELLED),
    (TicketStatus.COMPLETED, TicketStatus.CLOSED),
}


def test_initial_state_is_planned():
    assert TicketStateMachine.initial_state() is TicketStatus.PLANNED


@pytest.mark.parametrize("current,target", list(itertools.product(TicketStatus, TicketStatus)))
def test_transition_table(current: TicketStatus, target: TicketStatus):
    expected = current == target or (current, target) in ALLOWED
    assert TicketStateMachine.can_transition(current, target) is expected


def test_assert_transition_reports_both_states():
    with pytest.raises(InvalidTicketTransitionError) as exc:
        TicketStateMachine.assert_transition(TicketStatus.PLANNED, TicketStatus.COMPLETED)

    assert exc.value.current is TicketStatus.PLANNED
    assert exc.value.target is TicketStatus.COMPLETED
    assert "PLANNED" in str(exc.value) and "COMPLETED" in str(exc.value)


def test_terminal_states():
    assert TicketStateMachine.is_terminal(TicketStatus.CLOSED)
    assert TicketStateMachine.is_terminal(TicketStatus.CANCELLED)
    assert not TicketStateMachine.is_terminal(TicketStatus.COMPLETED)


def test_status_parse_normalizes_case_and_whitespace():
    assert TicketStatus.parse("  in_progress ") is TicketStatus.IN_PROGRESS
    with pytest.raises(InvalidInputError):
        TicketStatus.parse("DONE")


@pytest.mark.parametrize(
    "action,expected",
    [
        ("mark_in_progress", TicketStatus.IN_PROGRESS),
        ("MARK_COMPLETED", TicketStatus.COMPLETED),
        ("mark_closed", TicketStatus.CLOSED),
        ("Cancel", TicketStatus.CANCELLED),
    ],
)
def test_actions_map_to_statuses(action: str, expected: TicketStatus):
    assert TicketAction.parse(action).target_status is expected
    assert resolve_target_status(None, action) is expected


def test_explicit_status_wins_over_action():
    assert resolve_target_status("CLOSED", "cancel") is TicketStatus.CLOSED


def test_blank_status_falls_back_to_action():
    assert resolve_target_status("  ", "cancel") is TicketStatus.CANCELLED


def test_missing_status_and_action_is_rejected():
    with pytest.raises(InvalidInputError):
        resolve_target_status(None, None)
    with pytest.raises(InvalidInputError):
        resolve_target_status("", " ")


def test_unknown_action_is_rejected():
    with pytest.raises(InvalidInputError):
        resolve_target_status(None, "finish")
