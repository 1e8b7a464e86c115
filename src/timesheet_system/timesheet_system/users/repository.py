from __future__ import annotations

from typing import Optional, Protocol, Sequence

from ..core.enums import Role
from .model import User


class UserRepository(Protocol):
    """Repository interface for User.

    Note (DIP): the service layer depends on this interface, never on a
    concrete database.
    """

    def get_by_id(self, user_id: int) -> Optional[User]:
        raise NotImplementedError

    def get_by_email(self, email: str) -> Optional[User]:
        raise NotImplementedError

    def list_all(self) -> Sequence[User]:
        raise NotImplementedError

    def list_direct_reports(self, manager_id: int, *, role: Optional[Role] = Role.EMPLOYEE) -> Sequence[User]:
        """Users whose manager is ``manager_id``, ordered by last then first name."""

        raise NotImplementedError

    def create_user(
        self,
        *,
        email: str,
        first_name: str,
        last_name: str,
        password_hash: str,
        role: Role,
        manager_id: Optional[int],
    ) -> int:
        raise NotImplementedError

    def update_user(
        self,
        user_id: int,
        *,
        email: str,
        first_name: str,
        last_name: str,
        role: Role,
        manager_id: Optional[int],
    ) -> bool:
        raise NotImplementedError

    def delete_by_id(self, user_id: int) -> bool:
        raise NotImplementedError
