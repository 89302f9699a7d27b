from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import List, Optional
from uuid import UUID

from domain.models.join_request import JoinRequest

LEADER_ROLE = "Leader"


@dataclass(frozen=True)
class Attachment:
    label: str
    url: str
    filename: Optional[str]
    uploaded_at: datetime


class AttachmentKind(str, Enum):
    PHOTO = "photo"
    FILE = "file"


@dataclass(frozen=True)
class Upload:
    """A binary received from a caller, not yet stored."""
    filename: str
    content_type: str
    data: bytes

    @property
    def size(self) -> int:
        return len(self.data)


@dataclass(frozen=True)
class Membership:
    team_id: UUID
    user_id: UUID
    hackathon_id: UUID
    role: Optional[str]
    joined_at: datetime

    @property
    def is_leader(self) -> bool:
        return self.role == LEADER_ROLE


@dataclass
class Team:
    id: UUID
    hackathon_id: UUID
    leader_id: UUID
    name: str
    created_at: datetime
    bio: Optional[str] = None
    roles_required: List[str] = field(default_factory=list)
    is_public: bool = True
    project_name: Optional[str] = None
    problem_statement: Optional[str] = None
    project_link: Optional[str] = None
    photo: Optional[str] = None
    attachments: List[Attachment] = field(default_factory=list)

    # read side only, filled in by repositories
    members: List[Membership] = field(default_factory=list)
    pending_requests: List[JoinRequest] = field(default_factory=list)

    def has_member(self, user_id: UUID) -> bool:
        return any(m.user_id == user_id for m in self.members)


# Fields a team member may change through update_team.
PATCHABLE_FIELDS = (
    "name",
    "bio",
    "roles_required",
    "is_public",
    "project_name",
    "problem_statement",
    "project_link",
    "photo",
)
