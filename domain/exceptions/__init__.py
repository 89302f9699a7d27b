from .base import (
    DomainError,
    NotFound,
    Forbidden,
    Conflict,
    InvalidOperation,
    ValidationError,
)

from .team import (
    TeamNotFound,
    InvalidTeamData,
    NotTeamMember,
    NotTeamLeader,
    TeamIsPrivate,
    AlreadyInTeam,
    StoreConflict,
    MembershipNotFound,
    LeaderCannotLeave,
    AttachmentRejected,
    AssetUploadFailed,
)

from .join_request import (
    JoinRequestNotFound,
    JoinRequestAlreadyHandled,
    LeaderCannotJoin,
    InvalidJoinAction,
)

from .hackathon import (
    HackathonNotFound,
    HackathonAlreadyExists,
    HackathonInvalidDates,
    NotHackathonHost,
)

__all__ = [
    "DomainError",
    "NotFound",
    "Forbidden",
    "Conflict",
    "InvalidOperation",
    "ValidationError",
    "TeamNotFound",
    "InvalidTeamData",
    "NotTeamMember",
    "NotTeamLeader",
    "TeamIsPrivate",
    "AlreadyInTeam",
    "StoreConflict",
    "MembershipNotFound",
    "LeaderCannotLeave",
    "AttachmentRejected",
    "AssetUploadFailed",
    "JoinRequestNotFound",
    "JoinRequestAlreadyHandled",
    "LeaderCannotJoin",
    "InvalidJoinAction",
    "HackathonNotFound",
    "HackathonAlreadyExists",
    "HackathonInvalidDates",
    "NotHackathonHost",
]
