from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Iterable, List, Optional, Union

from ..common.datetime_utils import parse_iso_date
from ..common.validators import optional_text, require_hours, require_int
from ..core.constants import MAX_HOURS_PER_ENTRY
from ..core.exceptions import DomainError, NotFoundError, ValidationError
from ..core.permissions import can_edit_entries, ensure
from ..projects.repository import ProjectRepository
from ..timesheets.model import Timesheet
from ..timesheets.repository import TimesheetRepository
from ..timesheets.state_machine import ensure_editable
from ..users.model import Actor
from .model import TimeEntry
from .repository import TimeEntryRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EntryInput:
    timesheet_id: int
    project_id: int
    entry_date: date
    hours: float
    notes: Optional[str] = None

    @classmethod
    def from_dict(cls, item: Any) -> "EntryInput":
        if not isinstance(item, dict):
            raise ValidationError("Each entry must be a JSON object")
        return cls(
            timesheet_id=require_int(item.get("timesheet_id"), "timesheet_id"),
            project_id=require_int(item.get("project_id"), "project_id"),
            entry_date=parse_iso_date(item.get("date") or item.get("entry_date") or ""),
            hours=item.get("hours"),
            notes=item.get("notes"),
        )


@dataclass(frozen=True)
class SkippedEntry:
    index: int
    error: str
    message: str


@dataclass(frozen=True)
class BatchResult:
    saved: List[TimeEntry] = field(default_factory=list)
    skipped: List[SkippedEntry] = field(default_factory=list)


class TimeEntryService:
    """Guards every write to time entries.

    Rules: only the timesheet owner writes, only while the timesheet is
    DRAFT, one entry per (user, project, date), and zero-hour days are
    stored as no row at all.
    """

    def __init__(
        self,
        entries: TimeEntryRepository,
        timesheets: TimesheetRepository,
        projects: ProjectRepository,
    ):
        self._entries = entries
        self._timesheets = timesheets
        self._projects = projects

    def _editable_timesheet(self, actor: Actor, timesheet_id: int) -> Timesheet:
        ts = self._timesheets.get_by_id(int(timesheet_id))
        if not ts:
            raise NotFoundError("Timesheet not found")
        ensure(can_edit_entries(actor, owner_id=ts.user_id))
        ensure_editable(ts.status)
        return ts

    def upsert_entry(
        self,
        actor: Actor,
        *,
        timesheet_id: int,
        project_id: int,
        entry_date: date,
        hours: float,
        notes: Optional[str] = None,
    ) -> Optional[TimeEntry]:
        """Create, update or delete the actor's entry for (project, date).

        Returns the stored entry, or None when the call deleted an entry or
        had nothing to store. ``notes=None`` keeps the existing notes.
        """

        ts = self._editable_timesheet(actor, timesheet_id)
        hours = require_hours(hours, maximum=MAX_HOURS_PER_ENTRY)
        if not ts.period.contains(entry_date):
            raise ValidationError(
                f"Date {entry_date.isoformat()} is outside the timesheet week "
                f"{ts.week_start_date.isoformat()} - {ts.week_end_date.isoformat()}"
            )
        if not self._projects.get_by_id(int(project_id)):
            raise NotFoundError("Project not found")

        existing = self._entries.get_for_user_project_date(
            user_id=actor.user_id,
            project_id=int(project_id),
            entry_date=entry_date,
        )

        if existing:
            if hours == 0:
                self._entries.delete(existing.entry_id)
                logger.debug("entry %s removed (0h) by %s", existing.entry_id, actor.user_id)
                return None
            if not self._entries.update(
                existing.entry_id,
                hours=hours,
                notes=optional_text(notes) if notes is not None else existing.notes,
            ):
                raise NotFoundError("Time entry not found")
            return self._entries.get_by_id(existing.entry_id)

        if hours == 0:
            return None

        entry_id = self._entries.create(
            timesheet_id=ts.timesheet_id,
            user_id=actor.user_id,
            project_id=int(project_id),
            entry_date=entry_date,
            hours=hours,
            notes=optional_text(notes),
        )
        return self._entries.get_by_id(entry_id)

    def upsert_entries(self, actor: Actor, items: Iterable[Union[EntryInput, dict]]) -> BatchResult:
        """Apply ``upsert_entry`` to each item independently.

        Raw dicts are parsed per item. A failing item, malformed or rejected,
        is skipped and reported; it never undoes the items saved before or
        after it.
        """

        result = BatchResult()
        for index, item in enumerate(items):
            try:
                if not isinstance(item, EntryInput):
                    item = EntryInput.from_dict(item)
                entry = self.upsert_entry(
                    actor,
                    timesheet_id=item.timesheet_id,
                    project_id=item.project_id,
                    entry_date=item.entry_date,
                    hours=item.hours,
                    notes=item.notes,
                )
            except DomainError as exc:
                logger.warning("batch entry %s skipped for user %s: %s (%s)", index, actor.user_id, exc, exc.kind)
                result.skipped.append(SkippedEntry(index=index, error=exc.kind, message=str(exc)))
                continue
            if entry is not None:
                result.saved.append(entry)
        return result

    def _owned_entry(self, actor: Actor, entry_id: int) -> TimeEntry:
        entry = self._entries.get_by_id(int(entry_id))
        if not entry:
            raise NotFoundError("Time entry not found")
        ensure(can_edit_entries(actor, owner_id=entry.user_id))
        self._editable_timesheet(actor, entry.timesheet_id)
        return entry

    def update_entry(
        self,
        actor: Actor,
        entry_id: int,
        *,
        hours: float,
        notes: Optional[str] = None,
    ) -> Optional[TimeEntry]:
        entry = self._owned_entry(actor, entry_id)
        hours = require_hours(hours, maximum=MAX_HOURS_PER_ENTRY)
        if hours == 0:
            self._entries.delete(entry.entry_id)
            return None

        if not self._entries.update(
            entry.entry_id,
            hours=hours,
            notes=optional_text(notes) if notes is not None else entry.notes,
        ):
            raise NotFoundError("Time entry not found")
        return self._entries.get_by_id(entry.entry_id)

    def delete_entry(self, actor: Actor, entry_id: int) -> None:
        entry = self._owned_entry(actor, entry_id)
        if not self._entries.delete(entry.entry_id):
            raise NotFoundError("Time entry not found")
