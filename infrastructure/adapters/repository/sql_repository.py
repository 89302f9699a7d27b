from __future__ import annotations

from typing import List, Optional
from uuid import UUID

from sqlalchemy import delete, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, sessionmaker

from domain.ports.repository import (
    TeamRepositoryPort,
    MembershipRepositoryPort,
    JoinRequestRepositoryPort,
    HackathonRepositoryPort,
    UnitOfWorkPort,
)
from domain.models.team import Team, Membership, Attachment
from domain.models.join_request import JoinRequest, JoinRequestStatus
from domain.models.hackathon import Hackathon
from domain.exceptions import StoreConflict

from infrastructure.persistence.tables import (
    HackathonTable,
    TeamTable,
    TeamMemberTable,
    TeamJoinRequestTable,
    TeamAttachmentTable,
)


def _flush(session: Session) -> None:
    try:
        session.flush()
    except IntegrityError as e:
        session.rollback()
        raise StoreConflict(f"Write rejected by the store: {e.orig}") from e


# =========================
# Mappers
# =========================

def _to_membership(m: TeamMemberTable) -> Membership:
    return Membership(
        team_id=m.team_id,
        user_id=m.user_id,
        hackathon_id=m.hackathon_id,
        role=m.role,
        joined_at=m.joined_at,
    )


def _to_attachment(a: TeamAttachmentTable) -> Attachment:
    return Attachment(
        label=a.label,
        url=a.url,
        filename=a.filename,
        uploaded_at=a.uploaded_at,
    )


def _to_team(t: TeamTable, members: List[Membership], attachments: List[Attachment]) -> Team:
    return Team(
        id=t.id,
        hackathon_id=t.hackathon_id,
        leader_id=t.leader_id,
        name=t.name,
        created_at=t.created_at,
        bio=t.bio,
        roles_required=list(t.roles_required or []),
        is_public=t.is_public,
        project_name=t.project_name,
        problem_statement=t.problem_statement,
        project_link=t.project_link,
        photo=t.photo,
        attachments=attachments,
        members=members,
    )


def _to_join_request(r: TeamJoinRequestTable) -> JoinRequest:
    return JoinRequest(
        id=r.id,
        team_id=r.team_id,
        user_id=r.user_id,
        role=r.role,
        status=JoinRequestStatus(r.status),
        created_at=r.created_at,
        updated_at=r.updated_at,
    )


def _to_hackathon(h: HackathonTable) -> Hackathon:
    return Hackathon(
        id=h.id,
        title=h.title,
        host_id=h.host_id,
        start_date=h.start_date,
        end_date=h.end_date,
        created_at=h.created_at,
    )


# =========================
# Teams
# =========================

class SqlTeamRepository(TeamRepositoryPort):
    def __init__(self, session: Session):
        self.session = session

    def add(self, team: Team) -> None:
        self.session.add(
            TeamTable(
                id=team.id,
                hackathon_id=team.hackathon_id,
                leader_id=team.leader_id,
                name=team.name,
                bio=team.bio,
                roles_required=list(team.roles_required),
                is_public=team.is_public,
                project_name=team.project_name,
                problem_statement=team.problem_statement,
                project_link=team.project_link,
                photo=team.photo,
                created_at=team.created_at,
            )
        )
        _flush(self.session)

    def get(self, team_id: UUID) -> Optional[Team]:
        t = self.session.get(TeamTable, team_id)
        return self._load(t) if t else None

    def update(self, team: Team) -> None:
        t = self.session.get(TeamTable, team.id)
        if t is None:
            return
        t.name = team.name
        t.bio = team.bio
        t.roles_required = list(team.roles_required)
        t.is_public = team.is_public
        t.project_name = team.project_name
        t.problem_statement = team.problem_statement
        t.project_link = team.project_link
        t.photo = team.photo
        _flush(self.session)

    def delete(self, team_id: UUID) -> None:
        self.session.execute(delete(TeamTable).where(TeamTable.id == team_id))

    def list_by_hackathon(self, hackathon_id: UUID) -> List[Team]:
        rows = self.session.scalars(
            select(TeamTable)
            .where(TeamTable.hackathon_id == hackathon_id)
            .order_by(TeamTable.created_at)
        ).all()
        return [self._load(t) for t in rows]

    def find_led_by(self, hackathon_id: UUID, leader_id: UUID) -> Optional[Team]:
        t = self.session.scalars(
            select(TeamTable).where(
                TeamTable.hackathon_id == hackathon_id,
                TeamTable.leader_id == leader_id,
            )
        ).first()
        return self._load(t) if t else None

    def append_attachment(self, team_id: UUID, attachment: Attachment) -> None:
        last = self.session.scalar(
            select(func.max(TeamAttachmentTable.position)).where(TeamAttachmentTable.team_id == team_id)
        )
        self.session.add(
            TeamAttachmentTable(
                team_id=team_id,
                position=0 if last is None else last + 1,
                label=attachment.label,
                url=attachment.url,
                filename=attachment.filename,
                uploaded_at=attachment.uploaded_at,
            )
        )
        _flush(self.session)

    def delete_attachments(self, team_id: UUID) -> None:
        self.session.execute(delete(TeamAttachmentTable).where(TeamAttachmentTable.team_id == team_id))

    def _load(self, t: TeamTable) -> Team:
        members = self.session.scalars(
            select(TeamMemberTable)
            .where(TeamMemberTable.team_id == t.id)
            .order_by(TeamMemberTable.joined_at)
        ).all()
        attachments = self.session.scalars(
            select(TeamAttachmentTable)
            .where(TeamAttachmentTable.team_id == t.id)
            .order_by(TeamAttachmentTable.position, TeamAttachmentTable.id)
        ).all()
        return _to_team(
            t,
            members=[_to_membership(m) for m in members],
            attachments=[_to_attachment(a) for a in attachments],
        )


# =========================
# Memberships
# =========================

class SqlMembershipRepository(MembershipRepositoryPort):
    def __init__(self, session: Session):
        self.session = session

    def add(self, membership: Membership) -> None:
        self.session.add(
            TeamMemberTable(
                team_id=membership.team_id,
                user_id=membership.user_id,
                hackathon_id=membership.hackathon_id,
                role=membership.role,
                joined_at=membership.joined_at,
            )
        )
        _flush(self.session)

    def get(self, team_id: UUID, user_id: UUID) -> Optional[Membership]:
        m = self.session.get(TeamMemberTable, (team_id, user_id))
        return _to_membership(m) if m else None

    def list_by_team(self, team_id: UUID) -> List[Membership]:
        rows = self.session.scalars(
            select(TeamMemberTable)
            .where(TeamMemberTable.team_id == team_id)
            .order_by(TeamMemberTable.joined_at)
        ).all()
        return [_to_membership(m) for m in rows]

    def find_in_hackathon(self, hackathon_id: UUID, user_id: UUID) -> Optional[Membership]:
        m = self.session.scalars(
            select(TeamMemberTable).where(
                TeamMemberTable.hackathon_id == hackathon_id,
                TeamMemberTable.user_id == user_id,
            )
        ).first()
        return _to_membership(m) if m else None

    def delete(self, team_id: UUID, user_id: UUID) -> None:
        self.session.execute(
            delete(TeamMemberTable).where(
                TeamMemberTable.team_id == team_id,
                TeamMemberTable.user_id == user_id,
            )
        )

    def delete_by_team(self, team_id: UUID) -> None:
        self.session.execute(delete(TeamMemberTable).where(TeamMemberTable.team_id == team_id))


# =========================
# Join requests
# =========================

class SqlJoinRequestRepository(JoinRequestRepositoryPort):
    def __init__(self, session: Session):
        self.session = session

    def add(self, request: JoinRequest) -> None:
        self.session.add(
            TeamJoinRequestTable(
                id=request.id,
                team_id=request.team_id,
                user_id=request.user_id,
                role=request.role,
                status=request.status.value,
                created_at=request.created_at,
                updated_at=request.updated_at,
            )
        )
        _flush(self.session)

    def get(self, request_id: UUID, for_update: bool = False) -> Optional[JoinRequest]:
        stmt = select(TeamJoinRequestTable).where(TeamJoinRequestTable.id == request_id)
        if for_update:
            # ignored by sqlite, row lock on postgres
            stmt = stmt.with_for_update()
        r = self.session.scalars(stmt).first()
        return _to_join_request(r) if r else None

    def find(self, team_id: UUID, user_id: UUID) -> Optional[JoinRequest]:
        r = self.session.scalars(
            select(TeamJoinRequestTable).where(
                TeamJoinRequestTable.team_id == team_id,
                TeamJoinRequestTable.user_id == user_id,
            )
        ).first()
        return _to_join_request(r) if r else None

    def update(self, request: JoinRequest) -> None:
        r = self.session.get(TeamJoinRequestTable, request.id)
        if r is None:
            return
        r.role = request.role
        r.status = request.status.value
        r.updated_at = request.updated_at
        _flush(self.session)

    def list_pending_by_team(self, team_id: UUID) -> List[JoinRequest]:
        rows = self.session.scalars(
            select(TeamJoinRequestTable)
            .where(
                TeamJoinRequestTable.team_id == team_id,
                TeamJoinRequestTable.status == JoinRequestStatus.PENDING.value,
            )
            .order_by(TeamJoinRequestTable.updated_at.desc())
        ).all()
        return [_to_join_request(r) for r in rows]

    def list_pending_for_leader(self, leader_id: UUID) -> List[JoinRequest]:
        rows = self.session.scalars(
            select(TeamJoinRequestTable)
            .join(TeamTable, TeamTable.id == TeamJoinRequestTable.team_id)
            .where(
                TeamTable.leader_id == leader_id,
                TeamJoinRequestTable.status == JoinRequestStatus.PENDING.value,
            )
            .order_by(TeamJoinRequestTable.updated_at.desc())
        ).all()
        return [_to_join_request(r) for r in rows]

    def delete_by_team(self, team_id: UUID) -> None:
        self.session.execute(delete(TeamJoinRequestTable).where(TeamJoinRequestTable.team_id == team_id))


# =========================
# Hackathons
# =========================

class SqlHackathonRepository(HackathonRepositoryPort):
    def __init__(self, session: Session):
        self.session = session

    def add(self, hackathon: Hackathon) -> None:
        self.session.add(
            HackathonTable(
                id=hackathon.id,
                title=hackathon.title,
                host_id=hackathon.host_id,
                start_date=hackathon.start_date,
                end_date=hackathon.end_date,
                created_at=hackathon.created_at,
            )
        )
        _flush(self.session)

    def get(self, hackathon_id: UUID) -> Optional[Hackathon]:
        h = self.session.get(HackathonTable, hackathon_id)
        return _to_hackathon(h) if h else None

    def get_by_title(self, title: str) -> Optional[Hackathon]:
        h = self.session.scalars(select(HackathonTable).where(HackathonTable.title == title)).first()
        return _to_hackathon(h) if h else None

    def update(self, hackathon: Hackathon) -> None:
        h = self.session.get(HackathonTable, hackathon.id)
        if h is None:
            return
        h.title = hackathon.title
        h.start_date = hackathon.start_date
        h.end_date = hackathon.end_date
        _flush(self.session)

    def list(self) -> List[Hackathon]:
        rows = self.session.scalars(select(HackathonTable).order_by(HackathonTable.created_at)).all()
        return [_to_hackathon(h) for h in rows]

    def delete(self, hackathon_id: UUID) -> None:
        self.session.execute(delete(HackathonTable).where(HackathonTable.id == hackathon_id))


# =========================
# Unit of work
# =========================

class SqlAlchemyUnitOfWork(UnitOfWorkPort):
    def __init__(self, session_factory: sessionmaker):
        self.session_factory = session_factory
        self.session: Optional[Session] = None

    def __enter__(self) -> "SqlAlchemyUnitOfWork":
        self.session = self.session_factory()
        self.teams = SqlTeamRepository(self.session)
        self.memberships = SqlMembershipRepository(self.session)
        self.join_requests = SqlJoinRequestRepository(self.session)
        self.hackathons = SqlHackathonRepository(self.session)
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        try:
            self.rollback()
        finally:
            self.session.close()
            self.session = None

    def commit(self) -> None:
        try:
            self.session.commit()
        except IntegrityError as e:
            self.session.rollback()
            raise StoreConflict(f"Commit rejected by the store: {e.orig}") from e

    def rollback(self) -> None:
        self.session.rollback()
