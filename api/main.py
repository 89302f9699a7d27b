import logging
from pathlib import Path
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles
from dotenv import load_dotenv

from infrastructure.settings import Settings, get_settings
from api.routes.hackathons import router as hackathons_router
from api.routes.join_requests import router as join_requests_router
from api.routes.teams import router as teams_router


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    load_dotenv()
    settings = settings or get_settings()
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    app = FastAPI(title="Hackathon Teams", version="1.0.0")

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(hackathons_router)
    # before teams_router: /teams/join-requests must win over /teams/{team_id}
    app.include_router(join_requests_router)
    app.include_router(teams_router)

    if settings.asset_backend == "local" and settings.asset_base_url.startswith("/"):
        # LocalAssetStore hands out URLs under asset_base_url
        Path(settings.upload_dir).mkdir(parents=True, exist_ok=True)
        app.mount(
            settings.asset_base_url.rstrip("/"),
            StaticFiles(directory=settings.upload_dir),
            name="uploads",
        )
    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("api.main:app", host="0.0.0.0", port=8000)
