from __future__ import annotations

from flask import Flask

from ..common.http import current_actor, json_body, ok
from ..common.validators import optional_int
from ..container import Container


def register(app: Flask, container: Container) -> None:
    def actor():
        return current_actor(container.actor_resolver)

    @app.route("/api/me", methods=["GET"], endpoint="me")
    def me():
        a = actor()
        return ok({"user": container.user_service.get_user(a.user_id).public()})

    @app.route("/api/users", methods=["GET"], endpoint="list_users")
    def list_users():
        return ok([u.public() for u in container.user_service.list_users(actor())])

    @app.route("/api/users/employees", methods=["GET"], endpoint="list_employees")
    def list_employees():
        return ok([u.public() for u in container.user_service.list_direct_reports(actor())])

    @app.route("/api/users", methods=["POST"], endpoint="create_user")
    def create_user():
        a = actor()
        body = json_body()
        user = container.user_service.create_user(
            a,
            email=body.get("email", ""),
            password=body.get("password", ""),
            first_name=body.get("first_name", ""),
            last_name=body.get("last_name", ""),
            role=body.get("role") or "EMPLOYEE",
            manager_id=optional_int(body.get("manager_id"), "manager_id"),
        )
        return ok(user.public(), 201)

    @app.route("/api/users/<int:user_id>", methods=["PUT"], endpoint="update_user")
    def update_user(user_id: int):
        a = actor()
        body = json_body()
        user = container.user_service.update_user(
            a,
            user_id,
            email=body.get("email"),
            first_name=body.get("first_name"),
            last_name=body.get("last_name"),
            role=body.get("role"),
            manager_id=optional_int(body.get("manager_id"), "manager_id"),
        )
        return ok(user.public())

    @app.route("/api/users/<int:user_id>", methods=["DELETE"], endpoint="delete_user")
    def delete_user(user_id: int):
        container.user_service.delete_user(actor(), user_id)
        return ok({"message": "User deleted successfully"})
