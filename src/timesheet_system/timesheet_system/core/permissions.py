"""Capability checks.

One function per action. Each takes the acting user plus whatever
relationship facts the action depends on (ownership, management) and returns
a ``Decision``; services turn a denial into ``AuthorizationError`` via
``ensure``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..users.model import Actor, User
from .enums import Role
from .exceptions import AuthorizationError

_REVIEWER_ROLES = frozenset({Role.MANAGER, Role.ADMIN})


@dataclass(frozen=True)
class Decision:
    allowed: bool
    reason: str = ""


ALLOW = Decision(True)


def deny(reason: str) -> Decision:
    return Decision(False, reason)


def ensure(decision: Decision) -> None:
    if not decision.allowed:
        raise AuthorizationError(decision.reason or "Not allowed")


def _requires_role(actor: Actor, roles: frozenset, what: str) -> Decision:
    if actor.role in roles:
        return ALLOW
    allowed = " or ".join(sorted(r.value for r in roles))
    return deny(f"Only {allowed} users may {what}")


def can_edit_entries(actor: Actor, *, owner_id: int) -> Decision:
    if actor.user_id != int(owner_id):
        return deny("Time entries can only be changed by the timesheet owner")
    return ALLOW


def can_submit(actor: Actor, *, owner_id: int) -> Decision:
    if actor.user_id != int(owner_id):
        return deny("Only the timesheet owner can submit it")
    return ALLOW


def can_review(actor: Actor, *, owner: Optional[User]) -> Decision:
    """Approve/reject: the owner's manager, or any ADMIN."""

    if actor.role == Role.ADMIN:
        return ALLOW
    if actor.role != Role.MANAGER:
        return deny("Only managers can review timesheets")
    if owner is None or owner.manager_id != actor.user_id:
        return deny("You are not this employee's manager")
    return ALLOW


def can_view_timesheet(actor: Actor, *, owner: Optional[User], owner_id: int) -> Decision:
    if actor.user_id == int(owner_id):
        return ALLOW
    if can_review(actor, owner=owner).allowed:
        return ALLOW
    return deny("You cannot view this timesheet")


def can_list_pending(actor: Actor) -> Decision:
    return _requires_role(actor, _REVIEWER_ROLES, "list pending timesheets")


def can_view_status_matrix(actor: Actor) -> Decision:
    return _requires_role(actor, _REVIEWER_ROLES, "view the status matrix")


def can_view_reports(actor: Actor) -> Decision:
    return _requires_role(actor, _REVIEWER_ROLES, "view reports")


def can_view_users(actor: Actor) -> Decision:
    return _requires_role(actor, _REVIEWER_ROLES, "list users")


def can_manage_users(actor: Actor) -> Decision:
    return _requires_role(actor, frozenset({Role.ADMIN}), "manage users")


def can_manage_projects(actor: Actor) -> Decision:
    return _requires_role(actor, frozenset({Role.ADMIN}), "manage projects")


def can_manage_assignments(actor: Actor) -> Decision:
    return _requires_role(actor, _REVIEWER_ROLES, "manage project assignments")
