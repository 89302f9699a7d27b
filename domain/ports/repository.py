from abc import ABC, abstractmethod
from typing import List, Optional
from uuid import UUID

from domain.models.team import Team, Membership, Attachment
from domain.models.join_request import JoinRequest
from domain.models.hackathon import Hackathon


# =========================
# Teams
# =========================

class TeamRepositoryPort(ABC):
    @abstractmethod
    def add(self, team: Team) -> None:
        pass

    @abstractmethod
    def get(self, team_id: UUID) -> Optional[Team]:
        """Returns the team with members and attachments, or None."""
        pass

    @abstractmethod
    def update(self, team: Team) -> None:
        """Persists descriptive fields. Leader, scope and attachments are left alone."""
        pass

    @abstractmethod
    def delete(self, team_id: UUID) -> None:
        pass

    @abstractmethod
    def list_by_hackathon(self, hackathon_id: UUID) -> List[Team]:
        pass

    @abstractmethod
    def find_led_by(self, hackathon_id: UUID, leader_id: UUID) -> Optional[Team]:
        pass

    @abstractmethod
    def append_attachment(self, team_id: UUID, attachment: Attachment) -> None:
        pass

    @abstractmethod
    def delete_attachments(self, team_id: UUID) -> None:
        pass


# =========================
# Memberships
# =========================

class MembershipRepositoryPort(ABC):
    @abstractmethod
    def add(self, membership: Membership) -> None:
        """Raises StoreConflict when (hackathon_id, user_id) is already taken."""
        pass

    @abstractmethod
    def get(self, team_id: UUID, user_id: UUID) -> Optional[Membership]:
        pass

    @abstractmethod
    def list_by_team(self, team_id: UUID) -> List[Membership]:
        pass

    @abstractmethod
    def find_in_hackathon(self, hackathon_id: UUID, user_id: UUID) -> Optional[Membership]:
        pass

    @abstractmethod
    def delete(self, team_id: UUID, user_id: UUID) -> None:
        pass

    @abstractmethod
    def delete_by_team(self, team_id: UUID) -> None:
        pass


# =========================
# Join requests
# =========================

class JoinRequestRepositoryPort(ABC):
    @abstractmethod
    def add(self, request: JoinRequest) -> None:
        pass

    @abstractmethod
    def get(self, request_id: UUID, for_update: bool = False) -> Optional[JoinRequest]:
        pass

    @abstractmethod
    def find(self, team_id: UUID, user_id: UUID) -> Optional[JoinRequest]:
        pass

    @abstractmethod
    def update(self, request: JoinRequest) -> None:
        pass

    @abstractmethod
    def list_pending_by_team(self, team_id: UUID) -> List[JoinRequest]:
        pass

    @abstractmethod
    def list_pending_for_leader(self, leader_id: UUID) -> List[JoinRequest]:
        """PENDING requests on every team led by leader_id, newest first."""
        pass

    @abstractmethod
    def delete_by_team(self, team_id: UUID) -> None:
        pass


# =========================
# Hackathons
# =========================

class HackathonRepositoryPort(ABC):
    @abstractmethod
    def add(self, hackathon: Hackathon) -> None:
        pass

    @abstractmethod
    def get(self, hackathon_id: UUID) -> Optional[Hackathon]:
        pass

    @abstractmethod
    def get_by_title(self, title: str) -> Optional[Hackathon]:
        pass

    @abstractmethod
    def update(self, hackathon: Hackathon) -> None:
        pass

    @abstractmethod
    def list(self) -> List[Hackathon]:
        pass

    @abstractmethod
    def delete(self, hackathon_id: UUID) -> None:
        pass

    def exists(self, hackathon_id: UUID) -> bool:
        return self.get(hackathon_id) is not None


# =========================
# Unit of work
# =========================

class UnitOfWorkPort(ABC):
    """
    One store transaction. Used as a context manager:

        with uow_factory() as uow:
            ...
            uow.commit()

    Leaving the block without commit() rolls everything back.
    """

    teams: TeamRepositoryPort
    memberships: MembershipRepositoryPort
    join_requests: JoinRequestRepositoryPort
    hackathons: HackathonRepositoryPort

    def __enter__(self) -> "UnitOfWorkPort":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.rollback()

    @abstractmethod
    def commit(self) -> None:
        pass

    @abstractmethod
    def rollback(self) -> None:
        pass
