from __future__ import annotations

from flask import Flask

from ..common.datetime_utils import parse_optional_date
from ..common.http import current_actor, json_body, ok
from ..common.validators import require_int
from ..container import Container


def register(app: Flask, container: Container) -> None:
    def actor():
        return current_actor(container.actor_resolver)

    @app.route("/api/projects", methods=["GET"], endpoint="list_projects")
    def list_projects():
        return ok(container.project_service.list_available(actor()))

    @app.route("/api/projects/assigned", methods=["GET"], endpoint="assigned_projects")
    def assigned_projects():
        return ok(container.project_service.list_assigned(actor()))

    @app.route("/api/projects/assignments", methods=["GET"], endpoint="list_assignments")
    def list_assignments():
        return ok(container.project_service.list_assignments(actor()))

    @app.route("/api/projects", methods=["POST"], endpoint="create_project")
    def create_project():
        a = actor()
        body = json_body()
        project = container.project_service.create_project(
            a,
            code=body.get("code", ""),
            name=body.get("name", ""),
            description=body.get("description"),
        )
        return ok(project, 201)

    @app.route("/api/projects/<int:project_id>", methods=["PUT"], endpoint="update_project")
    def update_project(project_id: int):
        a = actor()
        body = json_body()
        project = container.project_service.update_project(
            a,
            project_id,
            code=body.get("code"),
            name=body.get("name"),
            description=body.get("description"),
            active=body.get("active"),
        )
        return ok(project)

    @app.route("/api/projects/<int:project_id>/assign", methods=["POST"], endpoint="assign_project")
    def assign_project(project_id: int):
        a = actor()
        body = json_body()
        assignment = container.project_service.assign(
            a,
            project_id=project_id,
            user_id=require_int(body.get("user_id"), "user_id"),
            start_date=parse_optional_date(body.get("start_date")),
            end_date=parse_optional_date(body.get("end_date")),
        )
        return ok(assignment, 201)

    @app.route("/api/projects/<int:project_id>/assign/<int:user_id>", methods=["DELETE"], endpoint="unassign_project")
    def unassign_project(project_id: int, user_id: int):
        container.project_service.unassign(actor(), project_id=project_id, user_id=user_id)
        return ok({"message": "Assignment removed successfully"})
