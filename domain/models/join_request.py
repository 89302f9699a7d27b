from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional
from uuid import UUID


class JoinRequestStatus(str, Enum):
    PENDING = "PENDING"
    ACCEPTED = "ACCEPTED"
    DECLINED = "DECLINED"


class JoinAction(str, Enum):
    ACCEPT = "accept"
    DECLINE = "decline"


class SubmissionOutcome(str, Enum):
    CREATED = "created"
    RESUBMITTED = "resubmitted"
    ALREADY_PENDING = "already_pending"


@dataclass
class JoinRequest:
    id: UUID
    team_id: UUID
    user_id: UUID
    role: Optional[str]
    status: JoinRequestStatus
    created_at: datetime
    updated_at: datetime

    @property
    def is_pending(self) -> bool:
        return self.status == JoinRequestStatus.PENDING


@dataclass(frozen=True)
class JoinSubmission:
    request: JoinRequest
    outcome: SubmissionOutcome
