# care_core/events/status.py
"""
Event status lifecycle.

The allowed moves come from settings.CARE_CORE["EVENT_STATUS_TRANSITIONS"]:

- None (default) or "any": every move between statuses is allowed.
- "lifecycle": LIFECYCLE_TRANSITIONS below.
- a dict {status: [targets, ...]}: explicit table; statuses missing from
  it are terminal.

Setting a status to its current value is always a no-op.
"""
from __future__ import annotations

from typing import Dict, FrozenSet, Iterable, Optional

from django.conf import settings

from care_core.common.enums import EnumMapping
from care_core.common.exceptions import InvalidStatusTransition
from care_core.events.models import EventStatus

ANY = "any"
LIFECYCLE = "lifecycle"

LIFECYCLE_TRANSITIONS = {
    EventStatus.PENDING: {EventStatus.COMPLETED, EventStatus.CANCELLED, EventStatus.NO_SHOW},
    EventStatus.COMPLETED: {EventStatus.BILLED, EventStatus.CANCELLED, EventStatus.NO_SHOW},
    EventStatus.BILLED: {EventStatus.PAID},
    EventStatus.PAID: set(),
    EventStatus.CANCELLED: set(),
    EventStatus.NO_SHOW: set(),
}


class TransitionTable:
    def __init__(self, table: Optional[Dict[EventStatus, Iterable]] = None, *, permissive: bool = False):
        mapping = EnumMapping.for_enum(EventStatus)
        self.permissive = permissive
        self._table: Dict[EventStatus, FrozenSet[EventStatus]] = {}
        for source, targets in (table or {}).items():
            self._table[mapping.coerce(source)] = frozenset(mapping.coerce(t) for t in targets)

    @classmethod
    def from_config(cls, value=None) -> "TransitionTable":
        if value is None:
            return cls(permissive=True)
        if isinstance(value, str):
            if value.lower() == ANY:
                return cls(permissive=True)
            if value.lower() == LIFECYCLE:
                return cls(LIFECYCLE_TRANSITIONS)
            raise ValueError(f"Unsupported EVENT_STATUS_TRANSITIONS value: {value!r}")
        return cls(value)

    @classmethod
    def from_settings(cls) -> "TransitionTable":
        conf = getattr(settings, "CARE_CORE", {}) or {}
        return cls.from_config(conf.get("EVENT_STATUS_TRANSITIONS"))

    def allowed_targets(self, current) -> FrozenSet[EventStatus]:
        current = EnumMapping.for_enum(EventStatus).coerce(current)
        if self.permissive:
            return frozenset(s for s in EventStatus if s != current)
        return self._table.get(current, frozenset())

    def is_allowed(self, current, target) -> bool:
        mapping = EnumMapping.for_enum(EventStatus)
        current, target = mapping.coerce(current), mapping.coerce(target)
        if current == target:
            return True
        return target in self.allowed_targets(current)

    def is_terminal(self, current) -> bool:
        return not self.allowed_targets(current)

    def check(self, current, target) -> None:
        if not self.is_allowed(current, target):
            raise InvalidStatusTransition(current=current, target=target)


def transition_table() -> TransitionTable:
    # Read on every call so override_settings in tests is honoured.
    return TransitionTable.from_settings()


def check_transition(current, target, table: Optional[TransitionTable] = None) -> None:
    (table or transition_table()).check(current, target)


def apply_status(event, target, table: Optional[TransitionTable] = None) -> bool:
    """
    Move `event.status` to `target` in memory.

    Returns True when the status changed, False for a same-status no-op.
    Raises InvalidStatusTransition for a move the table does not allow.
    """
    target = EnumMapping.for_enum(EventStatus).coerce(target)
    if event.status == target:
        return False
    check_transition(event.status, target, table)
    event.status = target
    return True
