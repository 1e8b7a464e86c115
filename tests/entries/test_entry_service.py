from __future__ import annotations

from datetime import date

import pytest

from timesheet_system.core.enums import TimesheetStatus
from timesheet_system.core.exceptions import (
    AuthorizationError,
    InvalidStateError,
    NotFoundError,
    ValidationError,
)
from timesheet_system.entries.service import EntryInput

WEEK = date(2024, 1, 15)
TUESDAY = date(2024, 1, 16)


@pytest.fixture
def draft(store):
    return store.timesheets.add(store.alice.user_id, WEEK)


def upsert(container, store, ts, *, hours, day=TUESDAY, project=None, notes=None, user=None):
    return container.entry_service.upsert_entry(
        store.actor(user or store.alice),
        timesheet_id=ts.timesheet_id,
        project_id=(project or store.alpha).project_id,
        entry_date=day,
        hours=hours,
        notes=notes,
    )


def test_eight_then_zero_hours_leaves_no_row(store, container, draft):
    entry = upsert(container, store, draft, hours=8, notes="design")
    assert entry.hours == 8
    assert entry.project_code == "ALPHA"
    assert len(store.entries.entries) == 1

    assert upsert(container, store, draft, hours=0) is None
    assert store.entries.entries == {}

    view = container.timesheet_service.get_or_create_timesheet(store.actor(store.alice), WEEK)
    assert view.created is False
    assert list(view.entries) == []
    assert view.total_hours == 0


def test_zero_hours_without_entry_stores_nothing(store, container, draft):
    assert upsert(container, store, draft, hours=0) is None
    assert store.entries.entries == {}


def test_upsert_updates_in_place_and_keeps_notes(store, container, draft):
    first = upsert(container, store, draft, hours=4, notes="kickoff")
    second = upsert(container, store, draft, hours=6.5)

    assert second.entry_id == first.entry_id
    assert second.hours == 6.5
    assert second.notes == "kickoff"
    assert len(store.entries.entries) == 1

    third = upsert(container, store, draft, hours=6.5, notes="  review ")
    assert third.notes == "review"


def test_same_day_other_project_is_separate_entry(store, container, draft):
    upsert(container, store, draft, hours=4)
    upsert(container, store, draft, hours=4, project=store.beta)

    assert len(store.entries.entries) == 2


@pytest.mark.parametrize("hours", [-1, 24.5, "abc", None, float("nan")])
def test_hours_out_of_range(store, container, draft, hours):
    with pytest.raises(ValidationError):
        upsert(container, store, draft, hours=hours)


def test_hours_below_storage_precision_count_as_zero(store, container, draft):
    assert upsert(container, store, draft, hours=0.001) is None
    assert store.entries.entries == {}

    upsert(container, store, draft, hours=3)
    assert upsert(container, store, draft, hours=0.004) is None
    assert store.entries.entries == {}


def test_hours_are_stored_to_the_hundredth(store, container, draft):
    assert upsert(container, store, draft, hours=2.346).hours == pytest.approx(2.35)


def test_twenty_four_hours_is_allowed(store, container, draft):
    assert upsert(container, store, draft, hours=24).hours == 24


def test_date_outside_week_is_rejected(store, container, draft):
    with pytest.raises(ValidationError):
        upsert(container, store, draft, hours=8, day=date(2024, 1, 22))
    with pytest.raises(ValidationError):
        upsert(container, store, draft, hours=8, day=date(2024, 1, 14))


@pytest.mark.parametrize("status", [TimesheetStatus.SUBMITTED, TimesheetStatus.APPROVED, TimesheetStatus.REJECTED])
def test_locked_timesheet_is_read_only(store, container, status):
    ts = store.timesheets.add(store.alice.user_id, WEEK, status=status)

    with pytest.raises(InvalidStateError):
        upsert(container, store, ts, hours=8)
    assert store.entries.entries == {}


def test_only_owner_writes(store, container, draft):
    with pytest.raises(AuthorizationError):
        upsert(container, store, draft, hours=8, user=store.manager)


def test_unknown_timesheet_and_project(store, container, draft):
    with pytest.raises(NotFoundError):
        container.entry_service.upsert_entry(
            store.actor(store.alice), timesheet_id=999, project_id=store.alpha.project_id, entry_date=TUESDAY, hours=1
        )
    with pytest.raises(NotFoundError):
        container.entry_service.upsert_entry(
            store.actor(store.alice), timesheet_id=draft.timesheet_id, project_id=999, entry_date=TUESDAY, hours=1
        )


def test_batch_skips_failures_and_keeps_the_rest(store, container, draft):
    items = [
        EntryInput(draft.timesheet_id, store.alpha.project_id, date(2024, 1, 15), 8),
        EntryInput(draft.timesheet_id, store.alpha.project_id, date(2024, 1, 30), 8),
        EntryInput(draft.timesheet_id, 999, date(2024, 1, 16), 8),
        EntryInput(draft.timesheet_id, store.beta.project_id, date(2024, 1, 16), 0),
        EntryInput(draft.timesheet_id, store.beta.project_id, date(2024, 1, 17), 3.25),
    ]

    result = container.entry_service.upsert_entries(store.actor(store.alice), items)

    assert [e.entry_date for e in result.saved] == [date(2024, 1, 15), date(2024, 1, 17)]
    assert [(s.index, s.error) for s in result.skipped] == [(1, "VALIDATION_ERROR"), (2, "NOT_FOUND")]
    assert len(store.entries.entries) == 2


def test_batch_parses_raw_items_one_at_a_time(store, container, draft):
    good = {"timesheet_id": draft.timesheet_id, "project_id": store.alpha.project_id, "date": "2024-01-16", "hours": 8}
    items = [
        good,
        {**good, "date": "not-a-date"},
        {**good, "project_id": "alpha"},
        "not an object",
        {**good, "project_id": store.beta.project_id, "entry_date": "2024-01-17", "date": None},
    ]

    result = container.entry_service.upsert_entries(store.actor(store.alice), items)

    assert [e.entry_date for e in result.saved] == [date(2024, 1, 16), date(2024, 1, 17)]
    assert [(s.index, s.error) for s in result.skipped] == [
        (1, "VALIDATION_ERROR"),
        (2, "VALIDATION_ERROR"),
        (3, "VALIDATION_ERROR"),
    ]
    assert len(store.entries.entries) == 2


def test_update_and_delete_by_id(store, container, draft):
    entry = upsert(container, store, draft, hours=5)
    svc = container.entry_service
    alice = store.actor(store.alice)

    updated = svc.update_entry(alice, entry.entry_id, hours=7, notes="more")
    assert updated.hours == 7 and updated.notes == "more"

    assert svc.update_entry(alice, entry.entry_id, hours=0) is None
    assert store.entries.entries == {}

    again = upsert(container, store, draft, hours=2)
    with pytest.raises(AuthorizationError):
        svc.delete_entry(store.actor(store.bob), again.entry_id)
    svc.delete_entry(alice, again.entry_id)
    with pytest.raises(NotFoundError):
        svc.delete_entry(alice, again.entry_id)


def test_entries_freeze_after_submit(store, container, draft):
    entry = upsert(container, store, draft, hours=5)
    container.timesheet_service.submit_timesheet(store.actor(store.alice), draft.timesheet_id)

    with pytest.raises(InvalidStateError):
        container.entry_service.update_entry(store.actor(store.alice), entry.entry_id, hours=6)
    with pytest.raises(InvalidStateError):
        container.entry_service.delete_entry(store.actor(store.alice), entry.entry_id)
