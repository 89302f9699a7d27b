from uuid import UUID
from domain.exceptions.base import NotFound, InvalidOperation, ValidationError


class JoinRequestNotFound(NotFound):
    def __init__(self, request_id: UUID):
        super().__init__(f"Join request '{request_id}' not found")


class JoinRequestAlreadyHandled(InvalidOperation):
    def __init__(self, request_id: UUID, status: str):
        super().__init__(f"Join request '{request_id}' already handled (status={status})")


class LeaderCannotJoin(InvalidOperation):
    def __init__(self, team_id: UUID):
        super().__init__(f"You are already the leader of team '{team_id}'")


class InvalidJoinAction(ValidationError):
    def __init__(self, action: str):
        super().__init__(f"Invalid action '{action}': expected 'accept' or 'decline'")
