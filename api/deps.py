from functools import lru_cache, partial
from typing import Callable, Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from infrastructure.settings import Settings, get_settings
from infrastructure.database import build_engine, build_session_factory, init_db
from infrastructure.adapters.repository.sql_repository import SqlAlchemyUnitOfWork
from infrastructure.adapters.repository.memory_repository import InMemoryStore, InMemoryUnitOfWork
from infrastructure.adapters.identity.jwt_identity import JwtIdentityProvider
from infrastructure.adapters.storage.local_asset_store import LocalAssetStore
from infrastructure.adapters.storage.http_asset_store import HttpAssetStore

from domain.models.identity import Caller
from domain.ports.repository import UnitOfWorkPort
from domain.ports.identity import IdentityProviderPort
from domain.ports.asset_store import AssetStorePort
from domain.services.team_service import TeamService
from domain.services.join_request_service import JoinRequestService
from domain.services.hackathon_service import HackathonService


bearer_scheme = HTTPBearer(auto_error=False)


@lru_cache
def get_unit_of_work() -> Callable[[], UnitOfWorkPort]:
    settings = get_settings()
    if settings.store_backend == "memory":
        return partial(InMemoryUnitOfWork, InMemoryStore())

    engine = build_engine(settings.database_url)
    init_db(engine)
    return partial(SqlAlchemyUnitOfWork, build_session_factory(engine))


@lru_cache
def get_identity_provider() -> IdentityProviderPort:
    settings = get_settings()
    return JwtIdentityProvider(secret=settings.jwt_secret, algorithm=settings.jwt_algorithm)


@lru_cache
def get_asset_store() -> AssetStorePort:
    settings = get_settings()
    if settings.asset_backend == "http":
        return HttpAssetStore(upload_url=settings.asset_upload_url, timeout=settings.asset_upload_timeout)
    return LocalAssetStore(root=settings.upload_dir, base_url=settings.asset_base_url)


# =========================
# Callers
# =========================

def get_optional_caller(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    identity: IdentityProviderPort = Depends(get_identity_provider),
) -> Optional[Caller]:
    if credentials is None:
        return None
    return identity.resolve_caller(credentials.credentials)


def get_current_caller(caller: Optional[Caller] = Depends(get_optional_caller)) -> Caller:
    if caller is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return caller


# =========================
# Services
# =========================

def get_team_service(
    uow: Callable[[], UnitOfWorkPort] = Depends(get_unit_of_work),
    assets: AssetStorePort = Depends(get_asset_store),
    settings: Settings = Depends(get_settings),
) -> TeamService:
    return TeamService(
        unit_of_work=uow,
        asset_store=assets,
        require_existing_hackathon=settings.require_existing_hackathon,
        max_photo_bytes=settings.max_photo_bytes,
        max_file_bytes=settings.max_file_bytes,
    )


def get_join_request_service(uow: Callable[[], UnitOfWorkPort] = Depends(get_unit_of_work)) -> JoinRequestService:
    return JoinRequestService(unit_of_work=uow)


def get_hackathon_service(uow: Callable[[], UnitOfWorkPort] = Depends(get_unit_of_work)) -> HackathonService:
    return HackathonService(unit_of_work=uow)
