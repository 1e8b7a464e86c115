from __future__ import annotations

from flask import Flask

from ..common.datetime_utils import parse_iso_date
from ..common.http import current_actor, json_body, ok, query_int
from ..common.serialization import to_primitive
from ..container import Container
from ..core.constants import DEFAULT_MATRIX_WEEKS
from .model import TimesheetView
from .state_machine import allowed_actions


def view_to_json(view: TimesheetView) -> dict:
    data = to_primitive(view.timesheet)
    data["entries"] = to_primitive(view.entries)
    data["total_hours"] = view.total_hours
    data["created"] = view.created
    data["allowed_actions"] = sorted(a.value for a in allowed_actions(view.timesheet.status))
    return data


def register(app: Flask, container: Container) -> None:
    def actor():
        return current_actor(container.actor_resolver)

    default_weeks = int(app.config.get("DEFAULT_MATRIX_WEEKS", DEFAULT_MATRIX_WEEKS))

    @app.route("/api/timesheets/current", methods=["GET"], endpoint="current_timesheet")
    def current_timesheet():
        return ok(view_to_json(container.timesheet_service.get_current_timesheet(actor())))

    @app.route("/api/timesheets/week/<day>", methods=["GET"], endpoint="week_timesheet")
    def week_timesheet(day: str):
        a = actor()
        view = container.timesheet_service.get_or_create_timesheet(a, parse_iso_date(day))
        return ok(view_to_json(view))

    @app.route("/api/timesheets/pending", methods=["GET"], endpoint="pending_timesheets")
    def pending_timesheets():
        return ok(container.timesheet_service.list_pending(actor()))

    @app.route("/api/timesheets/status-matrix", methods=["GET"], endpoint="status_matrix")
    def status_matrix():
        a = actor()
        weeks = query_int("weeks")
        matrix = container.report_service.status_matrix(a, weeks if weeks is not None else default_weeks)
        return ok(matrix)

    @app.route("/api/timesheets/<int:timesheet_id>", methods=["GET"], endpoint="get_timesheet")
    def get_timesheet(timesheet_id: int):
        return ok(view_to_json(container.timesheet_service.get_timesheet(actor(), timesheet_id)))

    @app.route("/api/timesheets/<int:timesheet_id>/submit", methods=["PUT"], endpoint="submit_timesheet")
    def submit_timesheet(timesheet_id: int):
        return ok(view_to_json(container.timesheet_service.submit_timesheet(actor(), timesheet_id)))

    @app.route("/api/timesheets/<int:timesheet_id>/approve", methods=["PUT"], endpoint="approve_timesheet")
    def approve_timesheet(timesheet_id: int):
        a = actor()
        comments = json_body().get("comments")
        return ok(view_to_json(container.timesheet_service.approve_timesheet(a, timesheet_id, comments)))

    @app.route("/api/timesheets/<int:timesheet_id>/reject", methods=["PUT"], endpoint="reject_timesheet")
    def reject_timesheet(timesheet_id: int):
        a = actor()
        comments = json_body().get("comments")
        return ok(view_to_json(container.timesheet_service.reject_timesheet(a, timesheet_id, comments)))
