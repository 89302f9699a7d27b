from datetime import datetime
from typing import Optional
from uuid import UUID

from domain.models.team import Team, Membership, LEADER_ROLE
from domain.ports.repository import UnitOfWorkPort
from domain.exceptions import AlreadyInTeam, StoreConflict, MembershipNotFound, LeaderCannotLeave


class MembershipLedger:
    """
    Confirmed (team, user) pairs for one open unit of work.

    Every write goes through check_exclusive so a user never ends up in two
    teams of the same hackathon, leader included.
    """

    def __init__(self, uow: UnitOfWorkPort):
        self.uow = uow

    def check_exclusive(self, hackathon_id: UUID, user_id: UUID) -> bool:
        if self.uow.memberships.find_in_hackathon(hackathon_id, user_id) is not None:
            return False
        return self.uow.teams.find_led_by(hackathon_id, user_id) is None

    def add_member(self, team: Team, user_id: UUID, role: Optional[str]) -> Membership:
        if not self.check_exclusive(team.hackathon_id, user_id):
            raise AlreadyInTeam(team.hackathon_id, user_id)
        return self._insert(team, user_id, role)

    def add_leader(self, team: Team) -> Membership:
        """Leader row for a team just added in this unit of work; exclusivity is checked by the caller."""
        return self._insert(team, team.leader_id, LEADER_ROLE)

    def remove_member(self, team: Team, user_id: UUID) -> None:
        membership = self.uow.memberships.get(team.id, user_id)
        if membership is None:
            raise MembershipNotFound(team.id, user_id)
        if team.leader_id == user_id:
            raise LeaderCannotLeave(team.id)
        self.uow.memberships.delete(team.id, user_id)

    def _insert(self, team: Team, user_id: UUID, role: Optional[str]) -> Membership:
        membership = Membership(
            team_id=team.id,
            user_id=user_id,
            hackathon_id=team.hackathon_id,
            role=role,
            joined_at=datetime.utcnow(),
        )
        try:
            self.uow.memberships.add(membership)
        except StoreConflict:
            # a concurrent transaction took the (hackathon, user) slot first
            raise AlreadyInTeam(team.hackathon_id, user_id)
        return membership
