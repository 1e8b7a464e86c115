from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Callable, List, Optional

from ..common.datetime_utils import now_local
from ..common.validators import optional_text, require_non_empty
from ..core.enums import TimesheetAction, TimesheetStatus
from ..core.exceptions import ConflictError, InvalidTransitionError, NotFoundError
from ..core.permissions import can_list_pending, can_review, can_submit, can_view_timesheet, ensure
from ..entries.repository import TimeEntryRepository
from ..periods.resolver import period_for
from ..users.model import Actor, User
from ..users.repository import UserRepository
from .model import PendingTimesheet, Timesheet, TimesheetView
from .repository import TimesheetRepository
from .state_machine import next_status

logger = logging.getLogger(__name__)


class TimesheetService:
    """Read-or-create of weekly timesheets and the approval workflow."""

    def __init__(
        self,
        timesheets: TimesheetRepository,
        entries: TimeEntryRepository,
        users: UserRepository,
        *,
        clock: Callable[[], datetime] = now_local,
    ):
        self._timesheets = timesheets
        self._entries = entries
        self._users = users
        self._clock = clock

    def _view(self, ts: Timesheet, *, created: bool = False) -> TimesheetView:
        entries = list(self._entries.list_for_timesheets([ts.timesheet_id]))
        return TimesheetView(timesheet=ts, entries=entries, created=created)

    def _load(self, timesheet_id: int) -> Timesheet:
        ts = self._timesheets.get_by_id(int(timesheet_id))
        if not ts:
            raise NotFoundError("Timesheet not found")
        return ts

    def _owner(self, ts: Timesheet) -> Optional[User]:
        return self._users.get_by_id(ts.user_id)

    def get_or_create_timesheet(self, actor: Actor, on_date: date) -> TimesheetView:
        """Return the actor's timesheet for the week containing ``on_date``.

        Side effect: inserts a DRAFT timesheet when the week has none yet;
        ``TimesheetView.created`` tells the caller which case happened.
        """

        period = period_for(on_date)
        ts = self._timesheets.get_for_user_and_week(actor.user_id, period.week_start)
        if ts:
            return self._view(ts)

        try:
            timesheet_id = self._timesheets.create(
                user_id=actor.user_id,
                week_start=period.week_start,
                week_end=period.week_end,
            )
        except ConflictError:
            # Lost a race with a concurrent request for the same week.
            ts = self._timesheets.get_for_user_and_week(actor.user_id, period.week_start)
            if not ts:
                raise
            return self._view(ts)

        logger.info("timesheet %s created for user %s week %s", timesheet_id, actor.user_id, period.key)
        return self._view(self._load(timesheet_id), created=True)

    def get_current_timesheet(self, actor: Actor) -> TimesheetView:
        return self.get_or_create_timesheet(actor, self._clock().date())

    def get_timesheet(self, actor: Actor, timesheet_id: int) -> TimesheetView:
        ts = self._load(timesheet_id)
        ensure(can_view_timesheet(actor, owner=self._owner(ts), owner_id=ts.user_id))
        return self._view(ts)

    def submit_timesheet(self, actor: Actor, timesheet_id: int) -> TimesheetView:
        ts = self._load(timesheet_id)
        ensure(can_submit(actor, owner_id=ts.user_id))
        next_status(ts.status, TimesheetAction.SUBMIT)

        if not self._timesheets.mark_submitted(ts.timesheet_id, expected=ts.status, submitted_at=self._clock()):
            self._raise_stale(ts.timesheet_id, TimesheetAction.SUBMIT)

        logger.info("timesheet %s submitted by %s", ts.timesheet_id, actor.user_id)
        return self._view(self._load(ts.timesheet_id))

    def approve_timesheet(self, actor: Actor, timesheet_id: int, comments: Optional[str] = None) -> TimesheetView:
        ts = self._load(timesheet_id)
        ensure(can_review(actor, owner=self._owner(ts)))
        next_status(ts.status, TimesheetAction.APPROVE)

        ok = self._timesheets.mark_approved(
            ts.timesheet_id,
            expected=ts.status,
            approved_at=self._clock(),
            approver_id=actor.user_id,
            comments=optional_text(comments),
        )
        if not ok:
            self._raise_stale(ts.timesheet_id, TimesheetAction.APPROVE)

        logger.info("timesheet %s approved by %s", ts.timesheet_id, actor.user_id)
        return self._view(self._load(ts.timesheet_id))

    def reject_timesheet(self, actor: Actor, timesheet_id: int, comments: Optional[str]) -> TimesheetView:
        # Comment is checked before anything is read or written.
        comments = require_non_empty(comments, "Rejection comment")

        ts = self._load(timesheet_id)
        ensure(can_review(actor, owner=self._owner(ts)))
        next_status(ts.status, TimesheetAction.REJECT)

        if not self._timesheets.mark_rejected(ts.timesheet_id, expected=ts.status, comments=comments):
            self._raise_stale(ts.timesheet_id, TimesheetAction.REJECT)

        logger.info("timesheet %s rejected by %s", ts.timesheet_id, actor.user_id)
        return self._view(self._load(ts.timesheet_id))

    def _raise_stale(self, timesheet_id: int, action: TimesheetAction) -> None:
        current = self._load(timesheet_id)
        next_status(current.status, action)
        raise InvalidTransitionError(f"Timesheet changed while trying to {action.value} it")

    def list_pending(self, actor: Actor) -> List[PendingTimesheet]:
        """SUBMITTED timesheets of the actor's direct reports, oldest submission first."""

        ensure(can_list_pending(actor))
        reports = {u.user_id: u for u in self._users.list_direct_reports(actor.user_id)}
        if not reports:
            return []

        pending = list(self._timesheets.list_for_users(list(reports), status=TimesheetStatus.SUBMITTED))
        entries = self._entries.list_for_timesheets([ts.timesheet_id for ts in pending])
        by_sheet: dict[int, list] = {}
        for e in entries:
            by_sheet.setdefault(e.timesheet_id, []).append(e)

        out: List[PendingTimesheet] = []
        for ts in pending:
            sheet_entries = by_sheet.get(ts.timesheet_id, [])
            out.append(
                PendingTimesheet(
                    timesheet=ts,
                    employee=reports[ts.user_id].public(),
                    entries=sheet_entries,
                    total_hours=sum(e.hours for e in sheet_entries),
                )
            )
        return out
