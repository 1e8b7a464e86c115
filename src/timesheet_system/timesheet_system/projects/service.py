from __future__ import annotations

import logging
from datetime import date
from typing import Callable, Optional, Sequence

from ..common.datetime_utils import today_local
from ..common.validators import optional_text, require_non_empty
from ..core.enums import Role
from ..core.exceptions import ConflictError, NotFoundError, ValidationError
from ..core.permissions import can_manage_assignments, can_manage_projects, ensure
from ..users.model import Actor
from ..users.repository import UserRepository
from .model import AssignmentRow, Project, ProjectAssignment
from .repository import ProjectRepository

logger = logging.getLogger(__name__)


class ProjectService:
    def __init__(
        self,
        projects: ProjectRepository,
        users: UserRepository,
        *,
        today: Callable[[], date] = today_local,
    ):
        self._projects = projects
        self._users = users
        self._today = today

    def get_project(self, project_id: int) -> Project:
        project = self._projects.get_by_id(int(project_id))
        if not project:
            raise NotFoundError("Project not found")
        return project

    def list_available(self, actor: Actor) -> Sequence[Project]:
        """Projects the actor can pick when logging time."""

        if actor.role == Role.ADMIN:
            return self._projects.list_projects(active_only=True)
        return self._projects.list_assigned(actor.user_id, today=self._today())

    def list_assigned(self, actor: Actor) -> Sequence[Project]:
        return self._projects.list_assigned(actor.user_id, today=self._today())

    def list_assignments(self, actor: Actor) -> Sequence[AssignmentRow]:
        ensure(can_manage_projects(actor))
        return self._projects.list_assignments()

    def create_project(self, actor: Actor, *, code: str, name: str, description: Optional[str] = None) -> Project:
        ensure(can_manage_projects(actor))
        code = require_non_empty(code, "Project code").upper()
        name = require_non_empty(name, "Project name")

        if self._projects.get_by_code(code):
            raise ConflictError(f"Project code {code} already exists")

        project_id = self._projects.create_project(code=code, name=name, description=optional_text(description))
        logger.info("project %s (%s) created by %s", project_id, code, actor.user_id)
        return self.get_project(project_id)

    def update_project(
        self,
        actor: Actor,
        project_id: int,
        *,
        code: Optional[str] = None,
        name: Optional[str] = None,
        description: Optional[str] = None,
        active: Optional[bool] = None,
    ) -> Project:
        ensure(can_manage_projects(actor))
        current = self.get_project(project_id)

        new_code = require_non_empty(code, "Project code").upper() if code is not None else current.code
        if new_code != current.code:
            other = self._projects.get_by_code(new_code)
            if other and other.project_id != current.project_id:
                raise ConflictError(f"Project code {new_code} already exists")

        self._projects.update_project(
            current.project_id,
            code=new_code,
            name=require_non_empty(name, "Project name") if name is not None else current.name,
            description=optional_text(description) if description is not None else current.description,
            active=bool(active) if active is not None else current.active,
        )
        logger.info("project %s updated by %s", current.project_id, actor.user_id)
        return self.get_project(current.project_id)

    def assign(
        self,
        actor: Actor,
        *,
        project_id: int,
        user_id: int,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> ProjectAssignment:
        """Assign a user to a project.

        (user, project) is unique: changing the dates means unassigning and
        assigning again.
        """

        ensure(can_manage_assignments(actor))
        project = self.get_project(project_id)
        if not project.active:
            raise ValidationError("Cannot assign an inactive project")
        if not self._users.get_by_id(int(user_id)):
            raise NotFoundError("User not found")

        start = start_date or self._today()
        if end_date is not None and end_date < start:
            raise ValidationError("End date must be on or after start date")

        if self._projects.get_assignment(user_id=int(user_id), project_id=project.project_id):
            raise ConflictError("User is already assigned to this project")

        self._projects.create_assignment(
            user_id=int(user_id),
            project_id=project.project_id,
            start_date=start,
            end_date=end_date,
        )
        logger.info("user %s assigned to project %s by %s", user_id, project.code, actor.user_id)
        return self._projects.get_assignment(user_id=int(user_id), project_id=project.project_id)

    def unassign(self, actor: Actor, *, project_id: int, user_id: int) -> None:
        ensure(can_manage_assignments(actor))
        if not self._projects.delete_assignment(user_id=int(user_id), project_id=int(project_id)):
            raise NotFoundError("Assignment not found")
        logger.info("user %s unassigned from project %s by %s", user_id, project_id, actor.user_id)
