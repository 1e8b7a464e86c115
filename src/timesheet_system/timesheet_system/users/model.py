from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..core.enums import Role


@dataclass(frozen=True)
class User:
    """Domain entity: User.

    Note: plain data object, no database access. ``manager_id`` is only
    meaningful for EMPLOYEE users.
    """

    user_id: int
    email: str
    first_name: str
    last_name: str
    role: Role
    manager_id: Optional[int] = None
    password_hash: str = ""

    @property
    def display_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    @property
    def sort_key(self) -> tuple:
        return (self.last_name.lower(), self.first_name.lower(), self.user_id)

    def public(self) -> dict:
        """Fields safe to hand to API clients."""

        return {
            "id": self.user_id,
            "email": self.email,
            "first_name": self.first_name,
            "last_name": self.last_name,
            "name": self.display_name,
            "role": self.role.value,
            "manager_id": self.manager_id,
        }


@dataclass(frozen=True)
class Actor:
    """The authenticated user a request acts as."""

    user_id: int
    role: Role
