from __future__ import annotations

import logging
import uuid
from dataclasses import replace
from datetime import datetime
from typing import Any, Callable, Dict, Optional, List
from uuid import UUID

from domain.ports.repository import UnitOfWorkPort
from domain.models.hackathon import Hackathon
from domain.models.identity import Caller, UserRole
from domain.exceptions import (
    HackathonNotFound,
    HackathonAlreadyExists,
    HackathonInvalidDates,
    NotHackathonHost,
    ValidationError,
)

PATCHABLE_FIELDS = ("title", "start_date", "end_date")


class HackathonService:
    def __init__(self, unit_of_work: Callable[[], UnitOfWorkPort]):
        self.unit_of_work = unit_of_work
        self.logger = logging.getLogger(__name__)

    def create_hackathon(
        self,
        caller: Caller,
        title: str,
        start_date: Optional[datetime],
        end_date: Optional[datetime],
    ) -> Hackathon:
        if caller.role not in (UserRole.HOST, UserRole.ADMIN):
            raise NotHackathonHost("Only hosts can create hackathons")
        if not title or not title.strip():
            raise ValidationError("Hackathon title is required")
        if start_date and end_date and start_date > end_date:
            raise HackathonInvalidDates()

        title = title.strip()
        with self.unit_of_work() as uow:
            if uow.hackathons.get_by_title(title) is not None:
                raise HackathonAlreadyExists(title)

            h = Hackathon(
                id=uuid.uuid4(),
                title=title,
                host_id=caller.user_id,
                start_date=start_date,
                end_date=end_date,
                created_at=datetime.utcnow(),
            )
            uow.hackathons.add(h)
            uow.commit()

        self.logger.info(f"Hackathon {h.id} created by {caller.user_id}")
        return h

    def get_hackathon(self, hackathon_id: UUID) -> Hackathon:
        with self.unit_of_work() as uow:
            h = uow.hackathons.get(hackathon_id)
        if h is None:
            raise HackathonNotFound(hackathon_id)
        return h

    def list_hackathons(self) -> List[Hackathon]:
        with self.unit_of_work() as uow:
            return uow.hackathons.list()

    def update_hackathon(self, hackathon_id: UUID, caller: Caller, patch: Dict[str, Any]) -> Hackathon:
        """Applies only the keys present in `patch`; dates may be cleared with None."""
        unknown = set(patch) - set(PATCHABLE_FIELDS)
        if unknown:
            raise ValidationError(f"Unknown hackathon fields: {', '.join(sorted(unknown))}")

        changes = dict(patch)
        if "title" in changes:
            if not changes["title"] or not changes["title"].strip():
                raise ValidationError("Hackathon title is required")
            changes["title"] = changes["title"].strip()

        with self.unit_of_work() as uow:
            h = uow.hackathons.get(hackathon_id)
            if h is None:
                raise HackathonNotFound(hackathon_id)
            self._require_owner(h, caller, "Not authorized to update this hackathon")

            updated = replace(h, **changes)
            if updated.start_date and updated.end_date and updated.start_date > updated.end_date:
                raise HackathonInvalidDates()
            if updated.title != h.title and uow.hackathons.get_by_title(updated.title) is not None:
                raise HackathonAlreadyExists(updated.title)

            uow.hackathons.update(updated)
            uow.commit()

        self.logger.info(f"Hackathon {hackathon_id} updated by {caller.user_id}: {sorted(changes)}")
        return updated

    def delete_hackathon(self, hackathon_id: UUID, caller: Caller) -> None:
        """Removes the hackathon and runs the team deletion cascade for each of its teams."""
        with self.unit_of_work() as uow:
            h = uow.hackathons.get(hackathon_id)
            if h is None:
                raise HackathonNotFound(hackathon_id)
            self._require_owner(h, caller, "Not authorized to delete this hackathon")

            for team in uow.teams.list_by_hackathon(hackathon_id):
                uow.join_requests.delete_by_team(team.id)
                uow.memberships.delete_by_team(team.id)
                uow.teams.delete_attachments(team.id)
                uow.teams.delete(team.id)
            uow.hackathons.delete(hackathon_id)
            uow.commit()

        self.logger.info(f"Hackathon {hackathon_id} deleted by {caller.user_id}")

    @staticmethod
    def _require_owner(h: Hackathon, caller: Caller, message: str) -> None:
        is_owner = caller.role == UserRole.HOST and h.host_id == caller.user_id
        if not is_owner and not caller.is_admin:
            raise NotHackathonHost(message)
