from dataclasses import dataclass
from enum import Enum
from uuid import UUID


class UserRole(str, Enum):
    HOST = "HOST"
    ADMIN = "ADMIN"
    PARTICIPANT = "PARTICIPANT"


@dataclass(frozen=True)
class Caller:
    user_id: UUID
    role: UserRole = UserRole.PARTICIPANT

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN

    @property
    def is_privileged(self) -> bool:
        return self.role in (UserRole.ADMIN, UserRole.HOST)
