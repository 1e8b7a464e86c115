from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Protocol, Sequence

from ..core.enums import TimesheetStatus
from .model import Timesheet


class TimesheetRepository(Protocol):
    def get_by_id(self, timesheet_id: int) -> Optional[Timesheet]:
        raise NotImplementedError

    def get_for_user_and_week(self, user_id: int, week_start: date) -> Optional[Timesheet]:
        raise NotImplementedError

    def create(self, *, user_id: int, week_start: date, week_end: date) -> int:
        """Insert a DRAFT timesheet. Raises ConflictError if the week already exists."""

        raise NotImplementedError

    def list_for_users(
        self,
        user_ids: Sequence[int],
        *,
        status: Optional[TimesheetStatus] = None,
        since: Optional[date] = None,
        until: Optional[date] = None,
    ) -> Sequence[Timesheet]:
        """Timesheets of ``user_ids`` ordered by submitted_at, then week start.

        ``since``/``until`` bound week_start_date inclusively.
        """

        raise NotImplementedError

    # Transitions are compare-and-set on the current status; False means the
    # row was not in ``expected`` any more.
    def mark_submitted(self, timesheet_id: int, *, expected: TimesheetStatus, submitted_at: datetime) -> bool:
        raise NotImplementedError

    def mark_approved(
        self,
        timesheet_id: int,
        *,
        expected: TimesheetStatus,
        approved_at: datetime,
        approver_id: int,
        comments: Optional[str],
    ) -> bool:
        raise NotImplementedError

    def mark_rejected(self, timesheet_id: int, *, expected: TimesheetStatus, comments: str) -> bool:
        raise NotImplementedError
