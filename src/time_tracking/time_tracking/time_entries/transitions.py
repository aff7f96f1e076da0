"""Sequencing rules for time entries.

Each employee's entries, ordered by creation time, must be a walk on this
graph. ``None`` stands for "no entry yet".
"""
from __future__ import annotations

from typing import Mapping, Optional

from ..core.enums import TimeEntryType, WorkState
from ..core.exceptions import InvalidSequenceError

VALID_TRANSITIONS: Mapping[Optional[TimeEntryType], frozenset[TimeEntryType]] = {
    None: frozenset({TimeEntryType.CLOCK_IN}),
    TimeEntryType.CLOCK_IN: frozenset({TimeEntryType.BREAK_START, TimeEntryType.CLOCK_OUT}),
    TimeEntryType.BREAK_START: frozenset({TimeEntryType.BREAK_END}),
    TimeEntryType.BREAK_END: frozenset({TimeEntryType.BREAK_START, TimeEntryType.CLOCK_OUT}),
    TimeEntryType.CLOCK_OUT: frozenset({TimeEntryType.CLOCK_IN}),
}

_STATE_AFTER: Mapping[Optional[TimeEntryType], WorkState] = {
    None: WorkState.OFF_DUTY,
    TimeEntryType.CLOCK_IN: WorkState.WORKING,
    TimeEntryType.BREAK_START: WorkState.ON_BREAK,
    TimeEntryType.BREAK_END: WorkState.WORKING,
    TimeEntryType.CLOCK_OUT: WorkState.OFF_DUTY,
}


def allowed_next(last_type: Optional[TimeEntryType]) -> frozenset[TimeEntryType]:
    return VALID_TRANSITIONS[last_type]


def validate_transition(last_type: Optional[TimeEntryType], new_type: TimeEntryType) -> bool:
    return new_type in VALID_TRANSITIONS.get(last_type, frozenset())


def ensure_transition(last_type: Optional[TimeEntryType], new_type: TimeEntryType) -> None:
    if not validate_transition(last_type, new_type):
        raise InvalidSequenceError(new_type, last_type)


def state_after(last_type: Optional[TimeEntryType]) -> WorkState:
    return _STATE_AFTER[last_type]
