from __future__ import annotations

from flask import Flask

from ..common.http import current_actor, ok, query_date_range, query_int
from ..container import Container


def register(app: Flask, container: Container) -> None:
    def actor():
        return current_actor(container.actor_resolver)

    @app.route("/api/reports/project-hours", methods=["GET"], endpoint="report_project_hours")
    def project_hours():
        a = actor()
        rows = container.report_service.entry_rows(
            a,
            query_date_range(),
            project_id=query_int("project_id"),
            user_id=query_int("user_id"),
        )
        return ok(rows)

    @app.route("/api/reports/summary", methods=["GET"], endpoint="report_summary")
    def summary():
        a = actor()
        date_range = query_date_range()
        data = container.report_service.summary(a, date_range)
        return ok({"summary": data, "date_range": date_range.describe()})

    @app.route("/api/reports/project-employee-breakdown", methods=["GET"], endpoint="report_project_employee")
    def project_employee_breakdown():
        a = actor()
        date_range = query_date_range()
        breakdown = container.report_service.project_employee_breakdown(
            a, date_range, project_id=query_int("project_id")
        )
        return ok({"breakdown": breakdown, "date_range": date_range.describe()})

    @app.route("/api/reports/employee-project-breakdown", methods=["GET"], endpoint="report_employee_project")
    def employee_project_breakdown():
        a = actor()
        date_range = query_date_range()
        breakdown = container.report_service.employee_project_breakdown(
            a, date_range, user_id=query_int("user_id")
        )
        return ok({"breakdown": breakdown, "date_range": date_range.describe()})
