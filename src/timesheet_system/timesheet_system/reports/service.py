from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Callable, List, Optional, Sequence

from ..common.datetime_utils import now_local
from ..core.constants import DEFAULT_MATRIX_WEEKS, MAX_MATRIX_WEEKS
from ..core.exceptions import ValidationError
from ..core.permissions import can_view_reports, can_view_status_matrix, ensure
from ..entries.model import EntryReportRow
from ..entries.repository import TimeEntryRepository
from ..periods.resolver import recent_periods
from ..timesheets.repository import TimesheetRepository
from ..users.model import Actor
from ..users.repository import UserRepository
from .aggregation import (
    build_employee_project_breakdown,
    build_project_employee_breakdown,
    build_status_matrix,
    build_summary,
)
from .model import DateRange, EmployeeBreakdown, ProjectBreakdown, StatusMatrix, Summary

logger = logging.getLogger(__name__)


class ReportService:
    """Aggregation engine entry point.

    Each call performs its own reads; results may include entries committed
    while the report was being built.
    """

    def __init__(
        self,
        entries: TimeEntryRepository,
        timesheets: TimesheetRepository,
        users: UserRepository,
        *,
        clock: Callable[[], datetime] = now_local,
    ):
        self._entries = entries
        self._timesheets = timesheets
        self._users = users
        self._clock = clock

    def _rows(
        self,
        date_range: DateRange,
        *,
        project_id: Optional[int] = None,
        user_id: Optional[int] = None,
    ) -> Sequence[EntryReportRow]:
        return self._entries.list_report_rows(
            start_date=date_range.start,
            end_date=date_range.end,
            project_id=project_id,
            user_id=user_id,
        )

    def entry_rows(
        self,
        actor: Actor,
        date_range: DateRange,
        *,
        project_id: Optional[int] = None,
        user_id: Optional[int] = None,
    ) -> Sequence[EntryReportRow]:
        ensure(can_view_reports(actor))
        return self._rows(date_range, project_id=project_id, user_id=user_id)

    def project_employee_breakdown(
        self,
        actor: Actor,
        date_range: DateRange,
        *,
        project_id: Optional[int] = None,
    ) -> List[ProjectBreakdown]:
        ensure(can_view_reports(actor))
        rows = self._rows(date_range, project_id=project_id)
        # A project picked explicitly is reported even when inactive.
        return build_project_employee_breakdown(rows, active_only=project_id is None)

    def employee_project_breakdown(
        self,
        actor: Actor,
        date_range: DateRange,
        *,
        user_id: Optional[int] = None,
    ) -> List[EmployeeBreakdown]:
        ensure(can_view_reports(actor))
        return build_employee_project_breakdown(self._rows(date_range, user_id=user_id))

    def summary(self, actor: Actor, date_range: DateRange) -> Summary:
        ensure(can_view_reports(actor))
        return build_summary(self._rows(date_range))

    def status_matrix(
        self,
        actor: Actor,
        week_count: int = DEFAULT_MATRIX_WEEKS,
        *,
        today: Optional[date] = None,
    ) -> StatusMatrix:
        """Approval status of the actor's direct reports over the last ``week_count`` weeks.

        Weeks are listed newest first, starting with the current week.
        """

        ensure(can_view_status_matrix(actor))
        if not 1 <= int(week_count) <= MAX_MATRIX_WEEKS:
            raise ValidationError(f"Week count must be between 1 and {MAX_MATRIX_WEEKS}")

        periods = recent_periods(today or self._clock().date(), int(week_count))
        reports = list(self._users.list_direct_reports(actor.user_id))
        timesheets = self._timesheets.list_for_users(
            [u.user_id for u in reports],
            since=periods[-1].week_start,
            until=periods[0].week_start,
        )
        matrix = build_status_matrix(reports, periods, timesheets)
        logger.debug(
            "status matrix for %s: %s cells (%s reports x %s weeks)",
            actor.user_id,
            matrix.cell_count,
            len(reports),
            len(periods),
        )
        return matrix
