from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Optional


@dataclass(frozen=True)
class Project:
    """Inactive projects drop out of pickers but stay in historical reports."""

    project_id: int
    code: str
    name: str
    description: Optional[str] = None
    active: bool = True


@dataclass(frozen=True)
class ProjectAssignment:
    """Links one user to one project; unique per (user, project)."""

    assignment_id: int
    user_id: int
    project_id: int
    start_date: date
    end_date: Optional[date] = None

    def is_current(self, today: date) -> bool:
        return self.end_date is None or self.end_date >= today


@dataclass(frozen=True)
class AssignmentRow:
    """Read-model for the admin assignment list (joined with user/project)."""

    assignment: ProjectAssignment
    user_name: str
    user_email: str
    project_code: str
    project_name: str
    project_active: bool
