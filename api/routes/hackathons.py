from __future__ import annotations

from datetime import datetime
from typing import Optional, List
from uuid import UUID

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from domain.services.hackathon_service import HackathonService
from domain.models.identity import Caller
from domain.exceptions import DomainError
from api.deps import get_hackathon_service, get_current_caller
from api.errors import to_http

router = APIRouter(prefix="/hackathons", tags=["hackathons"])

class HackathonCreateIn(BaseModel):
    title: str
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None

class HackathonUpdateIn(BaseModel):
    title: Optional[str] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None

class HackathonOut(BaseModel):
    id: UUID
    title: str
    host_id: Optional[UUID]
    start_date: Optional[datetime]
    end_date: Optional[datetime]
    created_at: datetime

@router.post("", response_model=HackathonOut, status_code=201)
def create_hackathon(
    payload: HackathonCreateIn,
    caller: Caller = Depends(get_current_caller),
    service: HackathonService = Depends(get_hackathon_service),
):
    try:
        h = service.create_hackathon(caller, payload.title, payload.start_date, payload.end_date)
        return HackathonOut(**h.__dict__)
    except DomainError as e:
        raise to_http(e)

@router.get("", response_model=List[HackathonOut])
def list_hackathons(service: HackathonService = Depends(get_hackathon_service)):
    hs = service.list_hackathons()
    return [HackathonOut(**h.__dict__) for h in hs]

@router.get("/{hackathon_id}", response_model=HackathonOut)
def get_hackathon(hackathon_id: UUID, service: HackathonService = Depends(get_hackathon_service)):
    try:
        h = service.get_hackathon(hackathon_id)
        return HackathonOut(**h.__dict__)
    except DomainError as e:
        raise to_http(e)

@router.put("/{hackathon_id}", response_model=HackathonOut)
def update_hackathon(
    hackathon_id: UUID,
    payload: HackathonUpdateIn,
    caller: Caller = Depends(get_current_caller),
    service: HackathonService = Depends(get_hackathon_service),
):
    patch = payload.model_dump(exclude_unset=True)
    if patch.get("title", "") is None:
        del patch["title"]
    try:
        h = service.update_hackathon(hackathon_id, caller, patch)
        return HackathonOut(**h.__dict__)
    except DomainError as e:
        raise to_http(e)

@router.delete("/{hackathon_id}", status_code=204)
def delete_hackathon(
    hackathon_id: UUID,
    caller: Caller = Depends(get_current_caller),
    service: HackathonService = Depends(get_hackathon_service),
):
    try:
        service.delete_hackathon(hackathon_id, caller)
    except DomainError as e:
        raise to_http(e)
