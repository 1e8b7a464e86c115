from __future__ import annotations

from flask import Flask

from ..common.http import current_actor, json_body, ok
from ..container import Container
from ..core.exceptions import ValidationError
from .service import EntryInput


def register(app: Flask, container: Container) -> None:
    def actor():
        return current_actor(container.actor_resolver)

    @app.route("/api/time-entries", methods=["POST"], endpoint="upsert_entry")
    def upsert_entry():
        a = actor()
        item = EntryInput.from_dict(json_body())
        entry = container.entry_service.upsert_entry(
            a,
            timesheet_id=item.timesheet_id,
            project_id=item.project_id,
            entry_date=item.entry_date,
            hours=item.hours,
            notes=item.notes,
        )
        return ok({"entry": entry})

    @app.route("/api/time-entries/batch", methods=["POST"], endpoint="upsert_entries")
    def upsert_entries():
        a = actor()
        items = json_body().get("entries")
        if not isinstance(items, list):
            raise ValidationError("entries must be a list")
        result = container.entry_service.upsert_entries(a, items)
        return ok(result)

    @app.route("/api/time-entries/<int:entry_id>", methods=["PUT"], endpoint="update_entry")
    def update_entry(entry_id: int):
        a = actor()
        body = json_body()
        entry = container.entry_service.update_entry(a, entry_id, hours=body.get("hours"), notes=body.get("notes"))
        return ok({"entry": entry})

    @app.route("/api/time-entries/<int:entry_id>", methods=["DELETE"], endpoint="delete_entry")
    def delete_entry(entry_id: int):
        container.entry_service.delete_entry(actor(), entry_id)
        return ok({"message": "Time entry deleted successfully"})
