from __future__ import annotations

from datetime import date, datetime

import pytest

from timesheet_system.core.enums import TimesheetStatus
from timesheet_system.core.exceptions import (
    AuthorizationError,
    InvalidTransitionError,
    NotFoundError,
    ValidationError,
)

WEEK = date(2024, 1, 15)


def test_current_timesheet_is_created_once(store, container):
    svc = container.timesheet_service
    alice = store.actor(store.alice)

    first = svc.get_current_timesheet(alice)
    second = svc.get_or_create_timesheet(alice, date(2024, 1, 21))

    assert first.created is True
    assert second.created is False
    assert first.timesheet.timesheet_id == second.timesheet.timesheet_id
    assert first.timesheet.week_start_date == WEEK
    assert first.timesheet.week_end_date == date(2024, 1, 21)
    assert first.timesheet.status == TimesheetStatus.DRAFT
    assert first.entries == []
    assert len(store.timesheets.timesheets) == 1


def test_create_race_falls_back_to_existing_row(store, container):
    existing = store.timesheets.add(store.alice.user_id, WEEK)
    original = store.timesheets.get_for_user_and_week
    calls = []

    def miss_once(user_id, week_start):
        calls.append(week_start)
        # First lookup misses as if another request inserted right after it.
        return None if len(calls) == 1 else original(user_id, week_start)

    store.timesheets.get_for_user_and_week = miss_once

    view = container.timesheet_service.get_or_create_timesheet(store.actor(store.alice), WEEK)

    assert view.timesheet.timesheet_id == existing.timesheet_id
    assert view.created is False
    assert store.timesheets.create_calls == 1


def test_submit_sets_timestamp(store, container):
    ts = store.timesheets.add(store.alice.user_id, WEEK)

    view = container.timesheet_service.submit_timesheet(store.actor(store.alice), ts.timesheet_id)

    assert view.timesheet.status == TimesheetStatus.SUBMITTED
    assert view.timesheet.submitted_at == datetime(2024, 1, 17, 10, 30)


def test_only_owner_submits(store, container):
    ts = store.timesheets.add(store.alice.user_id, WEEK)

    with pytest.raises(AuthorizationError):
        container.timesheet_service.submit_timesheet(store.actor(store.manager), ts.timesheet_id)
    assert store.timesheets.get_by_id(ts.timesheet_id).status == TimesheetStatus.DRAFT


def test_submit_twice_is_invalid(store, container):
    ts = store.timesheets.add(store.alice.user_id, WEEK, status=TimesheetStatus.SUBMITTED)

    with pytest.raises(InvalidTransitionError):
        container.timesheet_service.submit_timesheet(store.actor(store.alice), ts.timesheet_id)


def test_manager_approves_direct_report(store, container):
    ts = store.timesheets.add(store.alice.user_id, WEEK, status=TimesheetStatus.SUBMITTED)

    view = container.timesheet_service.approve_timesheet(store.actor(store.manager), ts.timesheet_id, " ok ")

    assert view.timesheet.status == TimesheetStatus.APPROVED
    assert view.timesheet.approver_id == store.manager.user_id
    assert view.timesheet.approved_at == datetime(2024, 1, 17, 10, 30)
    assert view.timesheet.comments == "ok"


def test_admin_approves_anyone(store, container):
    ts = store.timesheets.add(store.carol.user_id, WEEK, status=TimesheetStatus.SUBMITTED)

    view = container.timesheet_service.approve_timesheet(store.actor(store.admin), ts.timesheet_id)

    assert view.timesheet.status == TimesheetStatus.APPROVED
    assert view.timesheet.approver_id == store.admin.user_id


def test_other_manager_cannot_review(store, container):
    ts = store.timesheets.add(store.alice.user_id, WEEK, status=TimesheetStatus.SUBMITTED)
    svc = container.timesheet_service

    with pytest.raises(AuthorizationError):
        svc.approve_timesheet(store.actor(store.other_manager), ts.timesheet_id)
    with pytest.raises(AuthorizationError):
        svc.reject_timesheet(store.actor(store.other_manager), ts.timesheet_id, "no")
    with pytest.raises(AuthorizationError):
        svc.approve_timesheet(store.actor(store.alice), ts.timesheet_id)


def test_approve_draft_is_invalid(store, container):
    ts = store.timesheets.add(store.alice.user_id, WEEK)

    with pytest.raises(InvalidTransitionError):
        container.timesheet_service.approve_timesheet(store.actor(store.manager), ts.timesheet_id)


def test_reject_requires_comment_before_any_write(store, container):
    ts = store.timesheets.add(store.alice.user_id, WEEK, status=TimesheetStatus.SUBMITTED)

    for comment in (None, "", "   "):
        with pytest.raises(ValidationError):
            container.timesheet_service.reject_timesheet(store.actor(store.manager), ts.timesheet_id, comment)
    assert store.timesheets.get_by_id(ts.timesheet_id).status == TimesheetStatus.SUBMITTED


def test_rejected_is_terminal(store, container):
    ts = store.timesheets.add(store.alice.user_id, WEEK, status=TimesheetStatus.SUBMITTED)
    svc = container.timesheet_service

    view = svc.reject_timesheet(store.actor(store.manager), ts.timesheet_id, "incomplete")
    assert view.timesheet.status == TimesheetStatus.REJECTED
    assert view.timesheet.comments == "incomplete"
    assert view.timesheet.approved_at is None
    assert view.timesheet.approver_id is None

    stored = store.timesheets.get_by_id(ts.timesheet_id)
    assert stored.status == TimesheetStatus.REJECTED
    assert stored.approved_at is None

    with pytest.raises(InvalidTransitionError):
        svc.submit_timesheet(store.actor(store.alice), ts.timesheet_id)
    with pytest.raises(InvalidTransitionError):
        svc.approve_timesheet(store.actor(store.manager), ts.timesheet_id)


def test_lost_race_reports_invalid_transition(store, container):
    ts = store.timesheets.add(store.alice.user_id, WEEK, status=TimesheetStatus.SUBMITTED)
    original = store.timesheets.mark_approved

    def approve_after_concurrent_reject(timesheet_id, **kwargs):
        store.timesheets.mark_rejected(timesheet_id, expected=TimesheetStatus.SUBMITTED, comments="first")
        return original(timesheet_id, **kwargs)

    store.timesheets.mark_approved = approve_after_concurrent_reject

    with pytest.raises(InvalidTransitionError):
        container.timesheet_service.approve_timesheet(store.actor(store.manager), ts.timesheet_id)
    assert store.timesheets.get_by_id(ts.timesheet_id).status == TimesheetStatus.REJECTED


def test_unknown_timesheet(store, container):
    with pytest.raises(NotFoundError):
        container.timesheet_service.submit_timesheet(store.actor(store.alice), 999)


def test_view_access(store, container):
    ts = store.timesheets.add(store.alice.user_id, WEEK)
    svc = container.timesheet_service

    assert svc.get_timesheet(store.actor(store.alice), ts.timesheet_id).timesheet == ts
    assert svc.get_timesheet(store.actor(store.manager), ts.timesheet_id).timesheet == ts
    assert svc.get_timesheet(store.actor(store.admin), ts.timesheet_id).timesheet == ts
    with pytest.raises(AuthorizationError):
        svc.get_timesheet(store.actor(store.bob), ts.timesheet_id)
    with pytest.raises(AuthorizationError):
        svc.get_timesheet(store.actor(store.other_manager), ts.timesheet_id)


def test_pending_lists_only_direct_reports_oldest_first(store, container):
    later = store.timesheets.add(
        store.alice.user_id, WEEK, status=TimesheetStatus.SUBMITTED, submitted_at=datetime(2024, 1, 16, 9, 0)
    )
    earlier = store.timesheets.add(
        store.bob.user_id, WEEK, status=TimesheetStatus.SUBMITTED, submitted_at=datetime(2024, 1, 15, 9, 0)
    )
    store.timesheets.add(store.bob.user_id, date(2024, 1, 8))
    store.timesheets.add(store.carol.user_id, WEEK, status=TimesheetStatus.SUBMITTED)
    store.entries.create(
        timesheet_id=later.timesheet_id,
        user_id=store.alice.user_id,
        project_id=store.alpha.project_id,
        entry_date=WEEK,
        hours=7.5,
        notes=None,
    )

    pending = container.timesheet_service.list_pending(store.actor(store.manager))

    assert [p.timesheet.timesheet_id for p in pending] == [earlier.timesheet_id, later.timesheet_id]
    assert pending[1].total_hours == 7.5
    assert pending[1].employee["email"] == "alice@example.com"
    assert "password_hash" not in pending[1].employee


def test_pending_requires_reviewer_role(store, container):
    with pytest.raises(AuthorizationError):
        container.timesheet_service.list_pending(store.actor(store.alice))
