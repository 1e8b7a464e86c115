from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """User roles used for capability checks."""

    EMPLOYEE = "EMPLOYEE"
    MANAGER = "MANAGER"
    ADMIN = "ADMIN"


class TimesheetStatus(str, Enum):
    """Approval state of one employee's week, as stored in the database."""

    DRAFT = "DRAFT"
    SUBMITTED = "SUBMITTED"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"


class TimesheetAction(str, Enum):
    SUBMIT = "submit"
    APPROVE = "approve"
    REJECT = "reject"


# Status matrix cell for a week without a timesheet row. Never persisted.
NOT_CREATED = "NOT_CREATED"
