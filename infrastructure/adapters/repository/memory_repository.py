from __future__ import annotations

import copy
import threading
from dataclasses import replace
from typing import Dict, List, Optional, Tuple
from uuid import UUID

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


class InMemoryStore:
    """
    Process-local store shared by every InMemoryUnitOfWork built on it.

    Units of work are serialized on `lock`, which stands in for the
    transaction isolation a database would give.
    """

    def __init__(self):
        self.lock = threading.RLock()
        self.hackathons: Dict[UUID, Hackathon] = {}
        self.teams: Dict[UUID, Team] = {}
        self.memberships: Dict[Tuple[UUID, UUID], Membership] = {}  # (team_id, user_id)
        self.join_requests: Dict[UUID, JoinRequest] = {}
        self.attachments: Dict[UUID, List[Attachment]] = {}

    def snapshot(self) -> dict:
        return copy.deepcopy(
            {
                "hackathons": self.hackathons,
                "teams": self.teams,
                "memberships": self.memberships,
                "join_requests": self.join_requests,
                "attachments": self.attachments,
            }
        )

    def restore(self, state: dict) -> None:
        for name, value in state.items():
            setattr(self, name, value)


# =========================
# Teams
# =========================

class InMemoryTeamRepository(TeamRepositoryPort):
    def __init__(self, store: InMemoryStore):
        self.store = store

    def add(self, team: Team) -> None:
        self.store.teams[team.id] = replace(
            team,
            roles_required=list(team.roles_required),
            members=[],
            pending_requests=[],
            attachments=[],
        )
        self.store.attachments[team.id] = list(team.attachments)

    def get(self, team_id: UUID) -> Optional[Team]:
        team = self.store.teams.get(team_id)
        return self._load(team) if team else None

    def update(self, team: Team) -> None:
        stored = self.store.teams.get(team.id)
        if stored is None:
            return
        self.store.teams[team.id] = replace(
            stored,
            name=team.name,
            bio=team.bio,
            roles_required=list(team.roles_required),
            is_public=team.is_public,
            project_name=team.project_name,
            problem_statement=team.problem_statement,
            project_link=team.project_link,
            photo=team.photo,
        )

    def delete(self, team_id: UUID) -> None:
        self.store.teams.pop(team_id, None)

    def list_by_hackathon(self, hackathon_id: UUID) -> List[Team]:
        teams = [t for t in self.store.teams.values() if t.hackathon_id == hackathon_id]
        teams.sort(key=lambda t: t.created_at)
        return [self._load(t) for t in teams]

    def find_led_by(self, hackathon_id: UUID, leader_id: UUID) -> Optional[Team]:
        for t in self.store.teams.values():
            if t.hackathon_id == hackathon_id and t.leader_id == leader_id:
                return self._load(t)
        return None

    def append_attachment(self, team_id: UUID, attachment: Attachment) -> None:
        self.store.attachments.setdefault(team_id, []).append(attachment)

    def delete_attachments(self, team_id: UUID) -> None:
        self.store.attachments.pop(team_id, None)

    def _load(self, team: Team) -> Team:
        members = [m for m in self.store.memberships.values() if m.team_id == team.id]
        members.sort(key=lambda m: m.joined_at)
        return replace(
            team,
            roles_required=list(team.roles_required),
            members=members,
            attachments=list(self.store.attachments.get(team.id, [])),
            pending_requests=[],
        )


# =========================
# Memberships
# =========================

class InMemoryMembershipRepository(MembershipRepositoryPort):
    def __init__(self, store: InMemoryStore):
        self.store = store

    def add(self, membership: Membership) -> None:
        key = (membership.team_id, membership.user_id)
        if key in self.store.memberships:
            raise StoreConflict(f"Duplicate membership {key}")
        if self.find_in_hackathon(membership.hackathon_id, membership.user_id) is not None:
            raise StoreConflict(
                f"User '{membership.user_id}' already has a membership in hackathon '{membership.hackathon_id}'"
            )
        self.store.memberships[key] = membership

    def get(self, team_id: UUID, user_id: UUID) -> Optional[Membership]:
        return self.store.memberships.get((team_id, user_id))

    def list_by_team(self, team_id: UUID) -> List[Membership]:
        members = [m for m in self.store.memberships.values() if m.team_id == team_id]
        members.sort(key=lambda m: m.joined_at)
        return members

    def find_in_hackathon(self, hackathon_id: UUID, user_id: UUID) -> Optional[Membership]:
        for m in self.store.memberships.values():
            if m.hackathon_id == hackathon_id and m.user_id == user_id:
                return m
        return None

    def delete(self, team_id: UUID, user_id: UUID) -> None:
        self.store.memberships.pop((team_id, user_id), None)

    def delete_by_team(self, team_id: UUID) -> None:
        for key in [k for k in self.store.memberships if k[0] == team_id]:
            del self.store.memberships[key]


# =========================
# Join requests
# =========================

class InMemoryJoinRequestRepository(JoinRequestRepositoryPort):
    def __init__(self, store: InMemoryStore):
        self.store = store

    def add(self, request: JoinRequest) -> None:
        if self.find(request.team_id, request.user_id) is not None:
            raise StoreConflict(f"Duplicate join request for ({request.team_id}, {request.user_id})")
        self.store.join_requests[request.id] = replace(request)

    def get(self, request_id: UUID, for_update: bool = False) -> Optional[JoinRequest]:
        request = self.store.join_requests.get(request_id)
        return replace(request) if request else None

    def find(self, team_id: UUID, user_id: UUID) -> Optional[JoinRequest]:
        for r in self.store.join_requests.values():
            if r.team_id == team_id and r.user_id == user_id:
                return replace(r)
        return None

    def update(self, request: JoinRequest) -> None:
        if request.id in self.store.join_requests:
            self.store.join_requests[request.id] = replace(request)

    def list_pending_by_team(self, team_id: UUID) -> List[JoinRequest]:
        return self._newest_first(
            r for r in self.store.join_requests.values()
            if r.team_id == team_id and r.status == JoinRequestStatus.PENDING
        )

    def list_pending_for_leader(self, leader_id: UUID) -> List[JoinRequest]:
        led = {t.id for t in self.store.teams.values() if t.leader_id == leader_id}
        return self._newest_first(
            r for r in self.store.join_requests.values()
            if r.team_id in led and r.status == JoinRequestStatus.PENDING
        )

    def delete_by_team(self, team_id: UUID) -> None:
        for request_id in [r.id for r in self.store.join_requests.values() if r.team_id == team_id]:
            del self.store.join_requests[request_id]

    @staticmethod
    def _newest_first(requests) -> List[JoinRequest]:
        return [replace(r) for r in sorted(requests, key=lambda r: r.updated_at, reverse=True)]


# =========================
# Hackathons
# =========================

class InMemoryHackathonRepository(HackathonRepositoryPort):
    def __init__(self, store: InMemoryStore):
        self.store = store

    def add(self, hackathon: Hackathon) -> None:
        if self.get_by_title(hackathon.title) is not None:
            raise StoreConflict(f"Duplicate hackathon title '{hackathon.title}'")
        self.store.hackathons[hackathon.id] = hackathon

    def get(self, hackathon_id: UUID) -> Optional[Hackathon]:
        return self.store.hackathons.get(hackathon_id)

    def get_by_title(self, title: str) -> Optional[Hackathon]:
        for h in self.store.hackathons.values():
            if h.title == title:
                return h
        return None

    def update(self, hackathon: Hackathon) -> None:
        if hackathon.id in self.store.hackathons:
            self.store.hackathons[hackathon.id] = hackathon

    def list(self) -> List[Hackathon]:
        return sorted(self.store.hackathons.values(), key=lambda h: h.created_at)

    def delete(self, hackathon_id: UUID) -> None:
        self.store.hackathons.pop(hackathon_id, None)


# =========================
# Unit of work
# =========================

class InMemoryUnitOfWork(UnitOfWorkPort):
    def __init__(self, store: InMemoryStore):
        self.store = store
        self.teams = InMemoryTeamRepository(store)
        self.memberships = InMemoryMembershipRepository(store)
        self.join_requests = InMemoryJoinRequestRepository(store)
        self.hackathons = InMemoryHackathonRepository(store)
        self._baseline: Optional[dict] = None

    def __enter__(self) -> "InMemoryUnitOfWork":
        self.store.lock.acquire()
        self._baseline = self.store.snapshot()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        try:
            self.rollback()
        finally:
            self._baseline = None
            self.store.lock.release()

    def commit(self) -> None:
        self._baseline = self.store.snapshot()

    def rollback(self) -> None:
        if self._baseline is not None:
            self.store.restore(copy.deepcopy(self._baseline))
