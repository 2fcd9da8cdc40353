from __future__ import annotations

from dataclasses import dataclass

from src.core.auth import Role


@dataclass(slots=True, frozen=True)
class User:
    """Represents the authenticated account attached to a request."""

    user_id: str
    role: Role
    email: str = ""
    name: str = ""

    @property
    def is_admin(self) -> bool:
        return self.role is Role.ADMIN

    def owns(self, owner_id: str | None) -> bool:
        return owner_id is not None and owner_id == self.user_id
