from __future__ import annotations

from typing import Any, Optional

from flask import jsonify, request, session

from ..core.exceptions import ValidationError
from ..reports.model import DateRange
from ..users.model import Actor
from ..users.service import ActorResolver
from .datetime_utils import parse_optional_date
from .serialization import to_primitive
from .validators import optional_int


def current_actor(resolver: ActorResolver) -> Actor:
    # The session is populated by the external sign-in flow.
    return resolver.resolve(session.get("user_id"))


def json_body() -> dict:
    data = request.get_json(silent=True)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")
    return data


def ok(data: Any, status: int = 200):
    return jsonify(to_primitive(data)), status


def query_int(name: str) -> Optional[int]:
    return optional_int(request.args.get(name), name)


def query_date_range() -> DateRange:
    return DateRange(
        start=parse_optional_date(request.args.get("start_date")),
        end=parse_optional_date(request.args.get("end_date")),
    )
