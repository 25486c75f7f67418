"""The authenticated caller, as seen by domain and application code."""

from dataclasses import dataclass

from src.gm_common.enums import Role


@dataclass(frozen=True)
class Actor:
    id: str
    role: Role
    email: str | None = None

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN
