from __future__ import annotations

from datetime import datetime
from typing import List, Optional, Union
from uuid import UUID

from fastapi import APIRouter, Depends, File, Form, UploadFile
from pydantic import BaseModel, ConfigDict

from api.deps import get_team_service, get_current_caller, get_optional_caller
from api.errors import to_http
from domain.services.team_service import TeamService
from domain.models.identity import Caller
from domain.models.team import AttachmentKind, Upload
from domain.exceptions import DomainError

router = APIRouter(tags=["teams"])


class MembershipOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    team_id: UUID
    user_id: UUID
    role: Optional[str]
    joined_at: datetime


class AttachmentOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    label: str
    url: str
    filename: Optional[str]
    uploaded_at: datetime


class PendingRequestOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    user_id: UUID


class TeamOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    hackathon_id: UUID
    leader_id: UUID
    name: str
    bio: Optional[str]
    roles_required: List[str]
    is_public: bool
    project_name: Optional[str]
    problem_statement: Optional[str]
    project_link: Optional[str]
    photo: Optional[str]
    created_at: datetime
    members: List[MembershipOut]
    attachments: List[AttachmentOut]


class TeamListItemOut(TeamOut):
    pending_requests: List[PendingRequestOut]


class TeamCreateIn(BaseModel):
    name: str
    bio: Optional[str] = None
    roles_required: Union[List[str], str, None] = None
    is_public: bool = True


class TeamPatchIn(BaseModel):
    name: Optional[str] = None
    bio: Optional[str] = None
    roles_required: Union[List[str], str, None] = None
    is_public: Optional[bool] = None
    project_name: Optional[str] = None
    problem_statement: Optional[str] = None
    project_link: Optional[str] = None
    photo: Optional[str] = None


class InviteIn(BaseModel):
    user_id: UUID
    role: Optional[str] = None


@router.post("/hackathons/{hackathon_id}/teams", response_model=TeamOut, status_code=201)
def create_team(
    hackathon_id: UUID,
    payload: TeamCreateIn,
    caller: Caller = Depends(get_current_caller),
    service: TeamService = Depends(get_team_service),
):
    try:
        team = service.create_team(
            hackathon_id=hackathon_id,
            leader_id=caller.user_id,
            name=payload.name,
            bio=payload.bio,
            roles_required=payload.roles_required,
            is_public=payload.is_public,
        )
    except DomainError as e:
        raise to_http(e)
    return TeamOut.model_validate(team)


@router.get("/hackathons/{hackathon_id}/teams", response_model=List[TeamListItemOut])
def list_teams_by_hackathon(
    hackathon_id: UUID,
    service: TeamService = Depends(get_team_service),
):
    return [TeamListItemOut.model_validate(t) for t in service.list_teams(hackathon_id)]


@router.get("/teams/{team_id}", response_model=TeamOut)
def get_team(
    team_id: UUID,
    caller: Optional[Caller] = Depends(get_optional_caller),
    service: TeamService = Depends(get_team_service),
):
    try:
        return TeamOut.model_validate(service.get_team(team_id, caller))
    except DomainError as e:
        raise to_http(e)


@router.patch("/teams/{team_id}", response_model=TeamOut)
def update_team(
    team_id: UUID,
    payload: TeamPatchIn,
    caller: Caller = Depends(get_current_caller),
    service: TeamService = Depends(get_team_service),
):
    patch = {k: v for k, v in payload.model_dump(exclude_unset=True).items() if v is not None}
    try:
        return TeamOut.model_validate(service.update_team(team_id, caller.user_id, patch))
    except DomainError as e:
        raise to_http(e)


@router.delete("/teams/{team_id}", status_code=204)
def delete_team(
    team_id: UUID,
    caller: Caller = Depends(get_current_caller),
    service: TeamService = Depends(get_team_service),
):
    try:
        service.delete_team(team_id, caller)
    except DomainError as e:
        raise to_http(e)
    return None


@router.post("/teams/{team_id}/invite", response_model=MembershipOut, status_code=201)
def invite_to_team(
    team_id: UUID,
    payload: InviteIn,
    caller: Caller = Depends(get_current_caller),
    service: TeamService = Depends(get_team_service),
):
    try:
        membership = service.invite(team_id, caller.user_id, payload.user_id, payload.role)
    except DomainError as e:
        raise to_http(e)
    return MembershipOut.model_validate(membership)


@router.post("/teams/{team_id}/leave", status_code=204)
def leave_team(
    team_id: UUID,
    caller: Caller = Depends(get_current_caller),
    service: TeamService = Depends(get_team_service),
):
    try:
        service.leave_team(team_id, caller.user_id)
    except DomainError as e:
        raise to_http(e)
    return None


@router.post("/teams/{team_id}/upload", response_model=List[AttachmentOut], status_code=201)
def upload_team_files(
    team_id: UUID,
    photo: Optional[UploadFile] = File(None),
    file: Optional[UploadFile] = File(None),
    label: Optional[str] = Form(None),
    caller: Caller = Depends(get_current_caller),
    service: TeamService = Depends(get_team_service),
):
    received = [(AttachmentKind.PHOTO, photo), (AttachmentKind.FILE, file)]
    parts = [
        (
            kind,
            Upload(
                filename=f.filename or kind.value,
                content_type=f.content_type or "application/octet-stream",
                data=f.file.read(),
            ),
        )
        for kind, f in received
        if f is not None
    ]

    try:
        created = service.upload_attachments(team_id, caller.user_id, parts, label)
    except DomainError as e:
        raise to_http(e)
    return [AttachmentOut.model_validate(a) for a in created]
