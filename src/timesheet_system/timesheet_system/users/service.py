from __future__ import annotations

import logging
from typing import Any, Optional, Sequence

from werkzeug.security import generate_password_hash

from ..common.validators import require_min_length, require_non_empty
from ..core.constants import DEFAULT_PASSWORD_MIN_LENGTH
from ..core.enums import Role
from ..core.exceptions import AuthenticationError, ConflictError, NotFoundError, ValidationError
from ..core.permissions import can_manage_users, can_view_users, ensure
from .model import Actor, User
from .repository import UserRepository

logger = logging.getLogger(__name__)


class ActorResolver:
    """Use case: turn the session's user id into an ``Actor``.

    Credentials and sessions are issued elsewhere; this only checks that the
    id names an existing user and reads its current role.
    """

    def __init__(self, users: UserRepository):
        self._users = users

    def resolve(self, user_id: Any) -> Actor:
        if user_id is None or user_id == "":
            raise AuthenticationError("Authentication required")
        try:
            uid = int(user_id)
        except (TypeError, ValueError):
            raise AuthenticationError("Invalid session")

        user = self._users.get_by_id(uid)
        if not user:
            raise AuthenticationError("Invalid session")
        return Actor(user_id=user.user_id, role=user.role)


class UserService:
    """Use case: manage users (admin) and list reports (managers)."""

    def __init__(self, users: UserRepository):
        self._users = users

    def _parse_role(self, role: Any) -> Role:
        if isinstance(role, Role):
            return role
        try:
            return Role(str(role or Role.EMPLOYEE.value).upper())
        except ValueError:
            raise ValidationError(f"Unknown role {role!r}")

    def _check_manager(self, role: Role, manager_id: Optional[int], *, user_id: Optional[int] = None) -> Optional[int]:
        # Only employees carry a manager.
        if role != Role.EMPLOYEE or manager_id is None:
            return None
        if user_id is not None and int(manager_id) == int(user_id):
            raise ValidationError("A user cannot be their own manager")
        manager = self._users.get_by_id(int(manager_id))
        if not manager:
            raise NotFoundError("Manager not found")
        if manager.role == Role.EMPLOYEE:
            raise ValidationError("Manager must have the MANAGER or ADMIN role")
        return manager.user_id

    def get_user(self, user_id: int) -> User:
        user = self._users.get_by_id(int(user_id))
        if not user:
            raise NotFoundError("User not found")
        return user

    def list_users(self, actor: Actor) -> Sequence[User]:
        ensure(can_view_users(actor))
        return self._users.list_all()

    def list_direct_reports(self, actor: Actor) -> Sequence[User]:
        ensure(can_view_users(actor))
        return self._users.list_direct_reports(actor.user_id, role=None)

    def create_user(
        self,
        actor: Actor,
        *,
        email: str,
        password: str,
        first_name: str,
        last_name: str,
        role: Any = Role.EMPLOYEE,
        manager_id: Optional[int] = None,
    ) -> User:
        ensure(can_manage_users(actor))

        email = require_non_empty(email, "Email").lower()
        first_name = require_non_empty(first_name, "First name")
        last_name = require_non_empty(last_name, "Last name")
        require_min_length(password, "Password", DEFAULT_PASSWORD_MIN_LENGTH)
        parsed_role = self._parse_role(role)

        if self._users.get_by_email(email):
            raise ConflictError("Email already in use")

        user_id = self._users.create_user(
            email=email,
            first_name=first_name,
            last_name=last_name,
            password_hash=generate_password_hash(password),
            role=parsed_role,
            manager_id=self._check_manager(parsed_role, manager_id),
        )
        logger.info("user %s created by %s (role=%s)", user_id, actor.user_id, parsed_role.value)
        return self.get_user(user_id)

    def update_user(
        self,
        actor: Actor,
        user_id: int,
        *,
        email: Optional[str] = None,
        first_name: Optional[str] = None,
        last_name: Optional[str] = None,
        role: Any = None,
        manager_id: Optional[int] = None,
    ) -> User:
        """Update profile fields; omitted fields keep their value.

        Role changes leave existing timesheets untouched. A user moved off the
        EMPLOYEE role loses its manager.
        """

        ensure(can_manage_users(actor))
        current = self.get_user(user_id)

        new_email = require_non_empty(email, "Email").lower() if email is not None else current.email
        if new_email != current.email:
            other = self._users.get_by_email(new_email)
            if other and other.user_id != current.user_id:
                raise ConflictError("Email already in use")

        new_role = self._parse_role(role) if role is not None else current.role
        self._users.update_user(
            current.user_id,
            email=new_email,
            first_name=require_non_empty(first_name, "First name") if first_name is not None else current.first_name,
            last_name=require_non_empty(last_name, "Last name") if last_name is not None else current.last_name,
            role=new_role,
            manager_id=self._check_manager(
                new_role,
                manager_id if manager_id is not None else current.manager_id,
                user_id=current.user_id,
            ),
        )
        logger.info("user %s updated by %s", current.user_id, actor.user_id)
        return self.get_user(current.user_id)

    def delete_user(self, actor: Actor, user_id: int) -> None:
        ensure(can_manage_users(actor))
        if int(user_id) == actor.user_id:
            raise ValidationError("You cannot delete your own account")

        if not self._users.delete_by_id(int(user_id)):
            raise NotFoundError("User not found")
        logger.info("user %s deleted by %s", user_id, actor.user_id)
