import logging
from uuid import UUID, uuid4
from datetime import datetime
from typing import Callable, List, Optional, Union

from domain.models.join_request import (
    JoinRequest,
    JoinRequestStatus,
    JoinAction,
    JoinSubmission,
    SubmissionOutcome,
)
from domain.ports.repository import UnitOfWorkPort
from domain.services.membership_ledger import MembershipLedger
from domain.exceptions import (
    TeamNotFound,
    NotTeamLeader,
    AlreadyInTeam,
    JoinRequestNotFound,
    JoinRequestAlreadyHandled,
    LeaderCannotJoin,
    InvalidJoinAction,
    StoreConflict,
)


class JoinRequestService:
    """
    PENDING -> ACCEPTED | DECLINED, with terminal requests reopened to PENDING
    on a fresh submission. One request row per (team, user).
    """

    def __init__(self, unit_of_work: Callable[[], UnitOfWorkPort]):
        self.unit_of_work = unit_of_work
        self.logger = logging.getLogger(__name__)

    def submit_join(
        self,
        team_id: UUID,
        user_id: UUID,
        desired_role: Optional[str] = None,
    ) -> JoinSubmission:
        desired_role = (desired_role or "").strip() or None

        try:
            return self._submit(team_id, user_id, desired_role)
        except StoreConflict:
            # a concurrent first submission for the same (team, user) committed first
            with self.unit_of_work() as uow:
                existing = uow.join_requests.find(team_id, user_id)
            if existing is None or not existing.is_pending:
                raise
            self.logger.info(f"Join request {existing.id} was submitted concurrently by {user_id}")
            return JoinSubmission(request=existing, outcome=SubmissionOutcome.ALREADY_PENDING)

    def _submit(self, team_id: UUID, user_id: UUID, desired_role: Optional[str]) -> JoinSubmission:
        with self.unit_of_work() as uow:
            team = uow.teams.get(team_id)
            if team is None:
                raise TeamNotFound(team_id)
            if team.leader_id == user_id:
                raise LeaderCannotJoin(team_id)
            if not MembershipLedger(uow).check_exclusive(team.hackathon_id, user_id):
                raise AlreadyInTeam(team.hackathon_id, user_id)

            now = datetime.utcnow()
            existing = uow.join_requests.find(team_id, user_id)

            if existing is not None and existing.is_pending:
                return JoinSubmission(request=existing, outcome=SubmissionOutcome.ALREADY_PENDING)

            if existing is not None:
                existing.status = JoinRequestStatus.PENDING
                existing.role = desired_role or existing.role
                existing.updated_at = now
                uow.join_requests.update(existing)
                uow.commit()
                self.logger.info(f"Join request {existing.id} re-submitted by {user_id}")
                return JoinSubmission(request=existing, outcome=SubmissionOutcome.RESUBMITTED)

            request = JoinRequest(
                id=uuid4(),
                team_id=team_id,
                user_id=user_id,
                role=desired_role,
                status=JoinRequestStatus.PENDING,
                created_at=now,
                updated_at=now,
            )
            uow.join_requests.add(request)
            uow.commit()

        self.logger.info(f"Join request {request.id} sent by {user_id} to team {team_id}")
        return JoinSubmission(request=request, outcome=SubmissionOutcome.CREATED)

    def list_pending_for_leader(self, leader_id: UUID) -> List[JoinRequest]:
        with self.unit_of_work() as uow:
            return uow.join_requests.list_pending_for_leader(leader_id)

    def respond(
        self,
        request_id: UUID,
        leader_id: UUID,
        action: Union[JoinAction, str],
    ) -> JoinRequest:
        try:
            action = JoinAction(action)
        except ValueError:
            raise InvalidJoinAction(str(action))

        try:
            with self.unit_of_work() as uow:
                request = uow.join_requests.get(request_id, for_update=True)
                if request is None:
                    raise JoinRequestNotFound(request_id)
                team = uow.teams.get(request.team_id)
                if team is None:
                    raise TeamNotFound(request.team_id)
                if team.leader_id != leader_id:
                    raise NotTeamLeader(team.id, leader_id)
                if not request.is_pending:
                    raise JoinRequestAlreadyHandled(request_id, request.status.value)

                if action == JoinAction.DECLINE:
                    self._set_status(uow, request, JoinRequestStatus.DECLINED)
                    uow.commit()
                    self.logger.info(f"Join request {request_id} declined by {leader_id}")
                    return request

                ledger = MembershipLedger(uow)
                if not ledger.check_exclusive(team.hackathon_id, request.user_id):
                    self._set_status(uow, request, JoinRequestStatus.DECLINED)
                    uow.commit()
                    raise AlreadyInTeam(team.hackathon_id, request.user_id)

                ledger.add_member(team, request.user_id, request.role)
                self._set_status(uow, request, JoinRequestStatus.ACCEPTED)
                uow.commit()
        except AlreadyInTeam:
            # either declined above, or the store rejected the membership because
            # a concurrent accept committed first; the latter needs a fresh transaction
            self._decline_if_pending(request_id)
            self.logger.warning(f"Join request {request_id} declined: requester already in a team")
            raise

        self.logger.info(f"Join request {request_id} accepted by {leader_id}")
        return request

    def _set_status(self, uow: UnitOfWorkPort, request: JoinRequest, status: JoinRequestStatus) -> None:
        request.status = status
        request.updated_at = datetime.utcnow()
        uow.join_requests.update(request)

    def _decline_if_pending(self, request_id: UUID) -> None:
        with self.unit_of_work() as uow:
            request = uow.join_requests.get(request_id, for_update=True)
            if request is not None and request.is_pending:
                self._set_status(uow, request, JoinRequestStatus.DECLINED)
                uow.commit()
