from __future__ import annotations

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    database_url: str = "sqlite:///./hackathon_teams.db"
    store_backend: str = "sql"  # "sql" | "memory"

    jwt_secret: str = ""
    jwt_algorithm: str = "HS256"

    asset_backend: str = "local"  # "local" | "http"
    upload_dir: str = "uploads"
    asset_base_url: str = "/uploads"
    asset_upload_url: str = ""
    asset_upload_timeout: float = 30.0

    max_photo_bytes: int = 5 * 1024 * 1024
    max_file_bytes: int = 10 * 1024 * 1024

    require_existing_hackathon: bool = False

    log_level: str = "INFO"


@lru_cache
def get_settings() -> Settings:
    return Settings()
