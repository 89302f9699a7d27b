from __future__ import annotations

from datetime import datetime
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Response
from pydantic import BaseModel, ConfigDict

from api.deps import get_join_request_service, get_current_caller
from api.errors import to_http
from domain.services.join_request_service import JoinRequestService
from domain.models.identity import Caller
from domain.models.join_request import JoinRequestStatus, SubmissionOutcome
from domain.exceptions import DomainError

router = APIRouter(prefix="/teams", tags=["join requests"])


class JoinRequestOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    team_id: UUID
    user_id: UUID
    role: Optional[str]
    status: JoinRequestStatus
    created_at: datetime
    updated_at: datetime


class JoinSubmissionOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    outcome: SubmissionOutcome
    request: JoinRequestOut


class JoinIn(BaseModel):
    role: Optional[str] = None


class RespondIn(BaseModel):
    action: str


@router.get("/join-requests", response_model=List[JoinRequestOut])
def list_join_requests_for_leader(
    caller: Caller = Depends(get_current_caller),
    service: JoinRequestService = Depends(get_join_request_service),
):
    return [JoinRequestOut.model_validate(r) for r in service.list_pending_for_leader(caller.user_id)]


@router.post("/join-requests/{request_id}/respond", response_model=JoinRequestOut)
def respond_to_join_request(
    request_id: UUID,
    payload: RespondIn,
    caller: Caller = Depends(get_current_caller),
    service: JoinRequestService = Depends(get_join_request_service),
):
    try:
        request = service.respond(request_id, caller.user_id, payload.action)
    except DomainError as e:
        raise to_http(e)
    return JoinRequestOut.model_validate(request)


@router.post("/{team_id}/join", response_model=JoinSubmissionOut, status_code=201)
def join_team(
    team_id: UUID,
    response: Response,
    payload: Optional[JoinIn] = None,
    caller: Caller = Depends(get_current_caller),
    service: JoinRequestService = Depends(get_join_request_service),
):
    try:
        submission = service.submit_join(team_id, caller.user_id, payload.role if payload else None)
    except DomainError as e:
        raise to_http(e)

    if submission.outcome == SubmissionOutcome.ALREADY_PENDING:
        response.status_code = 200
    return JoinSubmissionOut.model_validate(submission)
