import logging
from uuid import UUID, uuid4
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple, Union

from domain.models.identity import Caller
from domain.models.team import (
    Team,
    Membership,
    Attachment,
    AttachmentKind,
    Upload,
    LEADER_ROLE,
    PATCHABLE_FIELDS,
)
from domain.ports.repository import UnitOfWorkPort
from domain.ports.asset_store import AssetStorePort
from domain.services.membership_ledger import MembershipLedger
from domain.exceptions import (
    TeamNotFound,
    InvalidTeamData,
    NotTeamMember,
    NotTeamLeader,
    TeamIsPrivate,
    AlreadyInTeam,
    AttachmentRejected,
    HackathonNotFound,
)

MAX_NAME_LENGTH = 120
DEFAULT_MAX_PHOTO_BYTES = 5 * 1024 * 1024
DEFAULT_MAX_FILE_BYTES = 10 * 1024 * 1024


def normalize_roles(roles_required: Union[str, Sequence[str], None]) -> List[str]:
    """Accepts a list or a comma separated string; trims entries and drops blanks."""
    if roles_required is None:
        return []
    if isinstance(roles_required, str):
        items = roles_required.split(",")
    else:
        items = list(roles_required)
    return [str(r).strip() for r in items if str(r).strip()]


def _clean_name(name: Optional[str]) -> str:
    if name is None or not str(name).strip():
        raise InvalidTeamData("Team name is required")
    name = str(name).strip()
    if len(name) > MAX_NAME_LENGTH:
        raise InvalidTeamData(f"Team name must be at most {MAX_NAME_LENGTH} characters")
    return name


class TeamService:
    def __init__(
        self,
        unit_of_work: Callable[[], UnitOfWorkPort],
        asset_store: Optional[AssetStorePort] = None,
        require_existing_hackathon: bool = False,
        max_photo_bytes: int = DEFAULT_MAX_PHOTO_BYTES,
        max_file_bytes: int = DEFAULT_MAX_FILE_BYTES,
    ):
        self.unit_of_work = unit_of_work
        self.asset_store = asset_store
        self.require_existing_hackathon = require_existing_hackathon
        self.max_photo_bytes = max_photo_bytes
        self.max_file_bytes = max_file_bytes
        self.logger = logging.getLogger(__name__)

    # =========================
    # Registry
    # =========================

    def create_team(
        self,
        hackathon_id: UUID,
        leader_id: UUID,
        name: str,
        bio: Optional[str] = None,
        roles_required: Union[str, Sequence[str], None] = None,
        is_public: bool = True,
    ) -> Team:
        team = Team(
            id=uuid4(),
            hackathon_id=hackathon_id,
            leader_id=leader_id,
            name=_clean_name(name),
            bio=bio,
            roles_required=normalize_roles(roles_required),
            is_public=is_public,
            created_at=datetime.utcnow(),
        )

        with self.unit_of_work() as uow:
            if self.require_existing_hackathon and not uow.hackathons.exists(hackathon_id):
                raise HackathonNotFound(hackathon_id)

            ledger = MembershipLedger(uow)
            if not ledger.check_exclusive(hackathon_id, leader_id):
                raise AlreadyInTeam(hackathon_id, leader_id)

            uow.teams.add(team)
            ledger.add_leader(team)
            uow.commit()
            created = uow.teams.get(team.id)

        self.logger.info(f"Team {team.id} created in hackathon {hackathon_id} by {leader_id}")
        return created

    def get_team(self, team_id: UUID, caller: Optional[Caller] = None) -> Team:
        with self.unit_of_work() as uow:
            team = uow.teams.get(team_id)
        if team is None:
            raise TeamNotFound(team_id)

        if not team.is_public:
            is_member = caller is not None and team.has_member(caller.user_id)
            is_privileged = caller is not None and caller.is_privileged
            if not is_member and not is_privileged:
                raise TeamIsPrivate(team_id)
        return team

    def list_teams(self, hackathon_id: UUID) -> List[Team]:
        with self.unit_of_work() as uow:
            teams = uow.teams.list_by_hackathon(hackathon_id)
            for team in teams:
                team.pending_requests = uow.join_requests.list_pending_by_team(team.id)
        return teams

    def update_team(self, team_id: UUID, caller_id: UUID, patch: Dict[str, Any]) -> Team:
        """
        Partial update: only keys present in `patch` are applied, everything
        else keeps its stored value.
        """
        unknown = set(patch) - set(PATCHABLE_FIELDS)
        if unknown:
            raise InvalidTeamData(f"Unknown team fields: {', '.join(sorted(unknown))}")

        changes = dict(patch)
        if "name" in changes:
            changes["name"] = _clean_name(changes["name"])
        if "roles_required" in changes:
            changes["roles_required"] = normalize_roles(changes["roles_required"])
        if "is_public" in changes and not isinstance(changes["is_public"], bool):
            raise InvalidTeamData("is_public must be a boolean")

        with self.unit_of_work() as uow:
            team = uow.teams.get(team_id)
            if team is None:
                raise TeamNotFound(team_id)
            if uow.memberships.get(team_id, caller_id) is None:
                raise NotTeamMember(team_id, caller_id)

            for key, value in changes.items():
                setattr(team, key, value)
            uow.teams.update(team)
            uow.commit()
            updated = uow.teams.get(team_id)

        self.logger.info(f"Team {team_id} updated by {caller_id}: {sorted(changes)}")
        return updated

    def delete_team(self, team_id: UUID, caller: Caller) -> None:
        with self.unit_of_work() as uow:
            team = uow.teams.get(team_id)
            if team is None:
                raise TeamNotFound(team_id)
            if team.leader_id != caller.user_id and not caller.is_admin:
                raise NotTeamLeader(team_id, caller.user_id)

            # dependency order: requests, memberships, attachments, team
            uow.join_requests.delete_by_team(team_id)
            uow.memberships.delete_by_team(team_id)
            uow.teams.delete_attachments(team_id)
            uow.teams.delete(team_id)
            uow.commit()

        self.logger.info(f"Team {team_id} deleted by {caller.user_id}")

    # =========================
    # Roster
    # =========================

    def invite(
        self,
        team_id: UUID,
        inviter_id: UUID,
        target_user_id: UUID,
        role: Optional[str] = None,
    ) -> Membership:
        with self.unit_of_work() as uow:
            team = uow.teams.get(team_id)
            if team is None:
                raise TeamNotFound(team_id)
            if team.leader_id != inviter_id:
                raise NotTeamLeader(team_id, inviter_id)

            membership = MembershipLedger(uow).add_member(team, target_user_id, role)
            uow.commit()

        self.logger.info(f"User {target_user_id} invited into team {team_id} as {role!r}")
        return membership

    def leave_team(self, team_id: UUID, user_id: UUID) -> None:
        with self.unit_of_work() as uow:
            team = uow.teams.get(team_id)
            if team is None:
                raise TeamNotFound(team_id)
            MembershipLedger(uow).remove_member(team, user_id)
            uow.commit()

        self.logger.info(f"User {user_id} left team {team_id}")

    # =========================
    # Attachments
    # =========================

    def upload_attachment(
        self,
        team_id: UUID,
        caller_id: UUID,
        kind: AttachmentKind,
        upload: Upload,
        label: Optional[str] = None,
    ) -> Attachment:
        return self.upload_attachments(team_id, caller_id, [(kind, upload)], label)[0]

    def upload_attachments(
        self,
        team_id: UUID,
        caller_id: UUID,
        parts: Sequence[Tuple[AttachmentKind, Upload]],
        label: Optional[str] = None,
    ) -> List[Attachment]:
        """
        Every part is validated before any binary is stored, and all
        descriptors are appended in one unit of work: either the whole batch
        lands on the team or none of it does.
        """
        if not parts:
            raise AttachmentRejected("No files provided")
        for kind, upload in parts:
            self._validate_upload(kind, upload)
        if self.asset_store is None:
            raise RuntimeError("No asset store configured")

        with self.unit_of_work() as uow:
            self._require_member(uow, team_id, caller_id)

        label = (label or "").strip() or "Attachment"
        attachments = [
            Attachment(
                label=label,
                url=self.asset_store.store(upload),
                filename=upload.filename,
                uploaded_at=datetime.utcnow(),
            )
            for _, upload in parts
        ]

        with self.unit_of_work() as uow:
            # membership may have changed while the binaries were uploading
            self._require_member(uow, team_id, caller_id)
            for attachment in attachments:
                uow.teams.append_attachment(team_id, attachment)
            uow.commit()

        self.logger.info(f"{len(attachments)} attachment(s) stored for team {team_id}")
        return attachments

    def _validate_upload(self, kind: AttachmentKind, upload: Upload) -> None:
        if upload.size == 0:
            raise AttachmentRejected("No file provided")
        if kind == AttachmentKind.PHOTO:
            if not (upload.content_type or "").startswith("image/"):
                raise AttachmentRejected("Photo must be an image")
            if upload.size > self.max_photo_bytes:
                raise AttachmentRejected(
                    f"Photo must be {self.max_photo_bytes // (1024 * 1024)}MB or smaller"
                )
        elif upload.size > self.max_file_bytes:
            raise AttachmentRejected(
                f"File must be {self.max_file_bytes // (1024 * 1024)}MB or smaller"
            )

    def _require_member(self, uow: UnitOfWorkPort, team_id: UUID, user_id: UUID) -> Team:
        team = uow.teams.get(team_id)
        if team is None:
            raise TeamNotFound(team_id)
        if uow.memberships.get(team_id, user_id) is None:
            raise NotTeamMember(team_id, user_id)
        return team
