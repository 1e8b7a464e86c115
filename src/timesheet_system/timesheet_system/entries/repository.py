from __future__ import annotations

from datetime import date
from typing import Optional, Protocol, Sequence

from .model import EntryReportRow, TimeEntry


class TimeEntryRepository(Protocol):
    def get_by_id(self, entry_id: int) -> Optional[TimeEntry]:
        raise NotImplementedError

    def get_for_user_project_date(self, *, user_id: int, project_id: int, entry_date: date) -> Optional[TimeEntry]:
        raise NotImplementedError

    def list_for_timesheets(self, timesheet_ids: Sequence[int]) -> Sequence[TimeEntry]:
        """Entries ordered by project id, then date."""

        raise NotImplementedError

    def create(
        self,
        *,
        timesheet_id: int,
        user_id: int,
        project_id: int,
        entry_date: date,
        hours: float,
        notes: Optional[str],
    ) -> int:
        """Raises ConflictError when (user, project, date) already has an entry."""

        raise NotImplementedError

    def update(self, entry_id: int, *, hours: float, notes: Optional[str]) -> bool:
        raise NotImplementedError

    def delete(self, entry_id: int) -> bool:
        raise NotImplementedError

    def list_report_rows(
        self,
        *,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        project_id: Optional[int] = None,
        user_id: Optional[int] = None,
    ) -> Sequence[EntryReportRow]:
        """Entries with ``start_date <= entry_date <= end_date`` (open bounds allowed),
        ordered by project code, last name, first name, date."""

        raise NotImplementedError
