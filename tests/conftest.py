from __future__ import annotations

from functools import partial
from typing import Callable, List
from uuid import UUID, uuid4

import pytest

from domain.models.team import Upload
from domain.ports.asset_store import AssetStorePort
from domain.ports.repository import UnitOfWorkPort
from domain.services.team_service import TeamService
from domain.services.join_request_service import JoinRequestService
from domain.services.hackathon_service import HackathonService
from infrastructure.adapters.repository.memory_repository import InMemoryStore, InMemoryUnitOfWork


class RecordingAssetStore(AssetStorePort):
    def __init__(self):
        self.stored: List[Upload] = []

    def store(self, upload: Upload) -> str:
        self.stored.append(upload)
        return f"https://assets.test/{len(self.stored)}/{upload.filename}"


@pytest.fixture()
def store() -> InMemoryStore:
    return InMemoryStore()


@pytest.fixture()
def uow(store: InMemoryStore) -> Callable[[], UnitOfWorkPort]:
    return partial(InMemoryUnitOfWork, store)


@pytest.fixture()
def assets() -> RecordingAssetStore:
    return RecordingAssetStore()


@pytest.fixture()
def teams(uow, assets) -> TeamService:
    return TeamService(unit_of_work=uow, asset_store=assets)


@pytest.fixture()
def join_requests(uow) -> JoinRequestService:
    return JoinRequestService(unit_of_work=uow)


@pytest.fixture()
def hackathons(uow) -> HackathonService:
    return HackathonService(unit_of_work=uow)


@pytest.fixture()
def hackathon_id() -> UUID:
    return uuid4()


@pytest.fixture()
def users():
    """Fresh user ids by attribute name: users.alice, users.bob, ..."""
    class _Users:
        def __init__(self):
            self._ids = {}

        def __getattr__(self, name: str) -> UUID:
            if name.startswith("_"):
                raise AttributeError(name)
            return self._ids.setdefault(name, uuid4())

    return _Users()
