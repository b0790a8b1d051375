import pytest
from django.test import override_settings

from care_core.common.exceptions import InvalidStatusTransition
from care_core.events.models import Event, EventStatus
from care_core.events.status import TransitionTable, apply_status, check_transition, transition_table


@pytest.mark.parametrize(
    "current, target",
    [
        (EventStatus.BILLED, EventStatus.PENDING),
        (EventStatus.PAID, EventStatus.COMPLETED),
        (EventStatus.PENDING, EventStatus.PAID),
        (EventStatus.CANCELLED, EventStatus.PENDING),
    ],
)
def test_unconfigured_table_allows_any_move(current, target):
    table = TransitionTable.from_config(None)

    assert table.permissive
    assert table.is_allowed(current, target)
    check_transition(current, target)


def test_any_is_the_same_as_unconfigured():
    table = TransitionTable.from_config("any")

    assert table.is_allowed(EventStatus.PAID, EventStatus.PENDING)
    assert not table.is_terminal(EventStatus.CANCELLED)


def test_lifecycle_table():
    table = TransitionTable.from_config("lifecycle")

    assert table.is_allowed(EventStatus.PENDING, EventStatus.COMPLETED)
    assert table.is_allowed(EventStatus.COMPLETED, EventStatus.BILLED)
    assert table.is_allowed(EventStatus.BILLED, EventStatus.PAID)
    assert not table.is_allowed(EventStatus.PENDING, EventStatus.PAID)
    assert not table.is_allowed(EventStatus.BILLED, EventStatus.PENDING)


@pytest.mark.parametrize("terminal", [EventStatus.PAID, EventStatus.CANCELLED, EventStatus.NO_SHOW])
def test_lifecycle_terminal_statuses(terminal):
    table = TransitionTable.from_config("lifecycle")

    assert table.is_terminal(terminal)
    with pytest.raises(InvalidStatusTransition):
        table.check(terminal, EventStatus.PENDING)


def test_same_status_is_always_allowed():
    table = TransitionTable.from_config("lifecycle")

    assert table.is_allowed(EventStatus.PAID, EventStatus.PAID)


def test_explicit_table_accepts_stored_strings():
    table = TransitionTable.from_config({"PENDING": ["COMPLETED"]})

    assert table.is_allowed(EventStatus.PENDING, EventStatus.COMPLETED)
    assert not table.is_allowed(EventStatus.PENDING, EventStatus.CANCELLED)
    assert table.is_terminal(EventStatus.COMPLETED)


def test_unsupported_string_config():
    with pytest.raises(ValueError):
        TransitionTable.from_config("loose")


def test_table_follows_settings():
    assert transition_table().permissive

    with override_settings(CARE_CORE={"EVENT_STATUS_TRANSITIONS": "lifecycle"}):
        assert not transition_table().permissive
        with pytest.raises(InvalidStatusTransition):
            check_transition(EventStatus.PAID, EventStatus.PENDING)


@override_settings(CARE_CORE={"EVENT_STATUS_TRANSITIONS": "lifecycle"})
def test_apply_status_reports_change():
    event = Event(status=EventStatus.PENDING)

    assert apply_status(event, "COMPLETED") is True
    assert event.status is EventStatus.COMPLETED
    assert apply_status(event, EventStatus.COMPLETED) is False

    with pytest.raises(InvalidStatusTransition) as exc:
        apply_status(event, EventStatus.PENDING)

    assert exc.value.current is EventStatus.COMPLETED
    assert exc.value.target is EventStatus.PENDING
    assert exc.value.status_code == 409
    assert event.status is EventStatus.COMPLETED
