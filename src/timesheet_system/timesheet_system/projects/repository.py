from __future__ import annotations

from datetime import date
from typing import Optional, Protocol, Sequence

from .model import AssignmentRow, Project, ProjectAssignment


class ProjectRepository(Protocol):
    def get_by_id(self, project_id: int) -> Optional[Project]:
        raise NotImplementedError

    def get_by_code(self, code: str) -> Optional[Project]:
        raise NotImplementedError

    def list_projects(self, *, active_only: bool = True) -> Sequence[Project]:
        """Ordered by code."""

        raise NotImplementedError

    def list_assigned(self, user_id: int, *, today: date) -> Sequence[Project]:
        """Active projects with a current assignment for ``user_id``, ordered by code."""

        raise NotImplementedError

    def create_project(self, *, code: str, name: str, description: Optional[str]) -> int:
        raise NotImplementedError

    def update_project(
        self,
        project_id: int,
        *,
        code: str,
        name: str,
        description: Optional[str],
        active: bool,
    ) -> bool:
        raise NotImplementedError

    # Assignments
    def get_assignment(self, *, user_id: int, project_id: int) -> Optional[ProjectAssignment]:
        raise NotImplementedError

    def list_assignments(self) -> Sequence[AssignmentRow]:
        raise NotImplementedError

    def create_assignment(
        self,
        *,
        user_id: int,
        project_id: int,
        start_date: date,
        end_date: Optional[date],
    ) -> int:
        raise NotImplementedError

    def delete_assignment(self, *, user_id: int, project_id: int) -> bool:
        raise NotImplementedError
