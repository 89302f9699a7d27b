from uuid import UUID
from domain.exceptions.base import DomainError, NotFound, Forbidden, Conflict, InvalidOperation, ValidationError


class TeamNotFound(NotFound):
    def __init__(self, team_id: UUID):
        super().__init__(f"Team with id '{team_id}' not found")


class InvalidTeamData(ValidationError):
    pass


class NotTeamMember(Forbidden):
    def __init__(self, team_id: UUID, user_id: UUID):
        super().__init__(f"User '{user_id}' is not a member of team '{team_id}'")


class NotTeamLeader(Forbidden):
    def __init__(self, team_id: UUID, user_id: UUID):
        super().__init__(f"User '{user_id}' is not the leader of team '{team_id}'")


class TeamIsPrivate(Forbidden):
    def __init__(self, team_id: UUID):
        super().__init__(f"Team '{team_id}' is private")


class AlreadyInTeam(Conflict):
    def __init__(self, hackathon_id: UUID, user_id: UUID):
        super().__init__(
            f"User '{user_id}' is already part of a team in hackathon '{hackathon_id}'"
        )


class StoreConflict(Conflict):
    """Raised by a unit of work when the store rejects a write on a uniqueness constraint."""


class MembershipNotFound(NotFound):
    def __init__(self, team_id: UUID, user_id: UUID):
        super().__init__(f"User '{user_id}' has no membership in team '{team_id}'")


class LeaderCannotLeave(InvalidOperation):
    def __init__(self, team_id: UUID):
        super().__init__(
            f"The leader cannot leave team '{team_id}'; delete the team instead"
        )


class AttachmentRejected(ValidationError):
    pass


class AssetUploadFailed(DomainError):
    kind = "asset_upload_failed"

    def __init__(self, filename: str, reason: str):
        super().__init__(f"Failed to store '{filename}': {reason}")
