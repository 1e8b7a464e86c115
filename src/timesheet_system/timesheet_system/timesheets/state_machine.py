"""Timesheet lifecycle.

DRAFT --submit--> SUBMITTED --approve--> APPROVED
                            --reject---> REJECTED

APPROVED and REJECTED have no outgoing edges. Entries may only change while
the timesheet is DRAFT.
"""

from __future__ import annotations

from typing import Dict, FrozenSet, Tuple

from ..core.enums import TimesheetAction, TimesheetStatus
from ..core.exceptions import InvalidStateError, InvalidTransitionError

TRANSITIONS: Dict[Tuple[TimesheetStatus, TimesheetAction], TimesheetStatus] = {
    (TimesheetStatus.DRAFT, TimesheetAction.SUBMIT): TimesheetStatus.SUBMITTED,
    (TimesheetStatus.SUBMITTED, TimesheetAction.APPROVE): TimesheetStatus.APPROVED,
    (TimesheetStatus.SUBMITTED, TimesheetAction.REJECT): TimesheetStatus.REJECTED,
}

EDITABLE_STATUSES: FrozenSet[TimesheetStatus] = frozenset({TimesheetStatus.DRAFT})


def next_status(current: TimesheetStatus, action: TimesheetAction) -> TimesheetStatus:
    target = TRANSITIONS.get((current, action))
    if target is None:
        raise InvalidTransitionError(f"Cannot {action.value} a timesheet that is {current.value}")
    return target


def allowed_actions(current: TimesheetStatus) -> FrozenSet[TimesheetAction]:
    return frozenset(action for (status, action) in TRANSITIONS if status == current)


def ensure_editable(current: TimesheetStatus) -> None:
    if current not in EDITABLE_STATUSES:
        raise InvalidStateError(f"Cannot modify a timesheet that is {current.value}")
