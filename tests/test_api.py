from __future__ import annotations

from functools import partial
from pathlib import Path
from uuid import uuid4

import pytest
from fastapi.testclient import TestClient

from api.main import create_app
from api.deps import get_asset_store, get_identity_provider, get_unit_of_work
from domain.models.identity import UserRole
from infrastructure.settings import Settings
from infrastructure.adapters.identity.jwt_identity import JwtIdentityProvider
from infrastructure.adapters.repository.memory_repository import InMemoryUnitOfWork
from infrastructure.adapters.storage.local_asset_store import LocalAssetStore

identity = JwtIdentityProvider("api-test-secret-that-is-long-enough-for-hs256")


def _test_app(store, asset_store, upload_dir: Path):
    app = create_app(Settings(upload_dir=str(upload_dir), asset_base_url="/uploads"))
    app.dependency_overrides[get_unit_of_work] = lambda: partial(InMemoryUnitOfWork, store)
    app.dependency_overrides[get_identity_provider] = lambda: identity
    app.dependency_overrides[get_asset_store] = lambda: asset_store
    return app


@pytest.fixture()
def client(store, assets, tmp_path: Path):
    with TestClient(_test_app(store, assets, tmp_path / "uploads")) as c:
        yield c


@pytest.fixture()
def auth(users):
    def _headers(name: str, role: UserRole = UserRole.PARTICIPANT) -> dict:
        return {"Authorization": f"Bearer {identity.issue_token(getattr(users, name), role)}"}

    return _headers


def _create_team(client, auth, hackathon_id, leader: str, name: str, **extra) -> dict:
    response = client.post(
        f"/hackathons/{hackathon_id}/teams",
        json={"name": name, **extra},
        headers=auth(leader),
    )
    assert response.status_code == 201, response.text
    return response.json()


def test_mutations_require_authentication(client, hackathon_id) -> None:
    assert client.post(f"/hackathons/{hackathon_id}/teams", json={"name": "Rocket"}).status_code == 401
    assert client.post(f"/teams/{uuid4()}/join").status_code == 401
    assert client.get("/teams/join-requests").status_code == 401
    bad = {"Authorization": "Bearer garbage"}
    assert client.post(f"/teams/{uuid4()}/leave", headers=bad).status_code == 401


def test_create_and_list_teams(client, auth, hackathon_id, users) -> None:
    team = _create_team(client, auth, hackathon_id, "alice", "Rocket", roles_required="ML, Design")

    assert team["leader_id"] == str(users.alice)
    assert team["roles_required"] == ["ML", "Design"]
    assert [m["role"] for m in team["members"]] == ["Leader"]

    listed = client.get(f"/hackathons/{hackathon_id}/teams").json()
    assert [t["id"] for t in listed] == [team["id"]]
    assert listed[0]["pending_requests"] == []


def test_second_team_for_same_leader_conflicts(client, auth, hackathon_id) -> None:
    _create_team(client, auth, hackathon_id, "alice", "Rocket")

    response = client.post(f"/hackathons/{hackathon_id}/teams", json={"name": "Again"}, headers=auth("alice"))

    assert response.status_code == 409
    assert response.json()["detail"]["kind"] == "conflict"


def test_join_flow(client, auth, hackathon_id, users) -> None:
    rocket = _create_team(client, auth, hackathon_id, "alice", "Rocket")
    comet = _create_team(client, auth, hackathon_id, "dave", "Comet")

    created = client.post(f"/teams/{rocket['id']}/join", json={"role": "Backend"}, headers=auth("bob"))
    assert created.status_code == 201
    assert created.json()["outcome"] == "created"
    request_id = created.json()["request"]["id"]

    again = client.post(f"/teams/{rocket['id']}/join", headers=auth("bob"))
    assert again.status_code == 200
    assert again.json()["outcome"] == "already_pending"

    pending = client.get("/teams/join-requests", headers=auth("alice")).json()
    assert [r["id"] for r in pending] == [request_id]

    forbidden = client.post(
        f"/teams/join-requests/{request_id}/respond", json={"action": "accept"}, headers=auth("dave")
    )
    assert forbidden.status_code == 403

    accepted = client.post(
        f"/teams/join-requests/{request_id}/respond", json={"action": "accept"}, headers=auth("alice")
    )
    assert accepted.status_code == 200
    assert accepted.json()["status"] == "ACCEPTED"

    members = client.get(f"/teams/{rocket['id']}").json()["members"]
    assert {m["user_id"]: m["role"] for m in members} == {str(users.alice): "Leader", str(users.bob): "Backend"}

    elsewhere = client.post(f"/teams/{comet['id']}/join", headers=auth("bob"))
    assert elsewhere.status_code == 409

    handled = client.post(
        f"/teams/join-requests/{request_id}/respond", json={"action": "decline"}, headers=auth("alice")
    )
    assert handled.status_code == 400


def test_respond_with_unknown_action(client, auth, hackathon_id) -> None:
    rocket = _create_team(client, auth, hackathon_id, "alice", "Rocket")
    request_id = client.post(f"/teams/{rocket['id']}/join", headers=auth("bob")).json()["request"]["id"]

    response = client.post(
        f"/teams/join-requests/{request_id}/respond", json={"action": "maybe"}, headers=auth("alice")
    )

    assert response.status_code == 400


def test_private_team_visibility(client, auth, hackathon_id) -> None:
    team = _create_team(client, auth, hackathon_id, "alice", "Stealth", is_public=False)

    assert client.get(f"/teams/{team['id']}").status_code == 403
    assert client.get(f"/teams/{team['id']}", headers=auth("mallory")).status_code == 403
    assert client.get(f"/teams/{team['id']}", headers=auth("alice")).status_code == 200
    assert client.get(f"/teams/{team['id']}", headers=auth("admin", UserRole.ADMIN)).status_code == 200
    assert client.get(f"/teams/{uuid4()}").status_code == 404


def test_patch_invite_and_leave(client, auth, hackathon_id, users) -> None:
    team = _create_team(client, auth, hackathon_id, "alice", "Rocket", bio="original")

    patched = client.patch(f"/teams/{team['id']}", json={"project_name": "Lander"}, headers=auth("alice"))
    assert patched.status_code == 200
    assert patched.json()["project_name"] == "Lander"
    assert patched.json()["bio"] == "original"

    assert client.patch(f"/teams/{team['id']}", json={"bio": "x"}, headers=auth("mallory")).status_code == 403

    invited = client.post(
        f"/teams/{team['id']}/invite", json={"user_id": str(users.bob), "role": "Design"}, headers=auth("alice")
    )
    assert invited.status_code == 201
    assert invited.json()["role"] == "Design"

    assert client.post(f"/teams/{team['id']}/leave", headers=auth("alice")).status_code == 400
    assert client.post(f"/teams/{team['id']}/leave", headers=auth("bob")).status_code == 204
    assert client.post(f"/teams/{team['id']}/leave", headers=auth("bob")).status_code == 404


def test_upload_route(client, auth, assets, hackathon_id) -> None:
    team = _create_team(client, auth, hackathon_id, "alice", "Rocket")

    response = client.post(
        f"/teams/{team['id']}/upload",
        files={"photo": ("logo.png", b"png-bytes", "image/png")},
        data={"label": "Logo"},
        headers=auth("alice"),
    )

    assert response.status_code == 201, response.text
    body = response.json()
    assert [(a["label"], a["filename"]) for a in body] == [("Logo", "logo.png")]
    assert client.get(f"/teams/{team['id']}").json()["attachments"][0]["url"] == body[0]["url"]
    assert assets.stored[0].data == b"png-bytes"


def test_upload_rejections(client, auth, hackathon_id) -> None:
    team = _create_team(client, auth, hackathon_id, "alice", "Rocket")

    no_files = client.post(f"/teams/{team['id']}/upload", data={"label": "x"}, headers=auth("alice"))
    assert no_files.status_code == 400

    not_image = client.post(
        f"/teams/{team['id']}/upload",
        files={"photo": ("notes.txt", b"hello", "text/plain")},
        headers=auth("alice"),
    )
    assert not_image.status_code == 400

    outsider = client.post(
        f"/teams/{team['id']}/upload",
        files={"file": ("notes.txt", b"hello", "text/plain")},
        headers=auth("mallory"),
    )
    assert outsider.status_code == 403


def test_delete_team(client, auth, hackathon_id) -> None:
    team = _create_team(client, auth, hackathon_id, "alice", "Rocket")

    assert client.delete(f"/teams/{team['id']}", headers=auth("bob")).status_code == 403
    assert client.delete(f"/teams/{team['id']}", headers=auth("alice")).status_code == 204
    assert client.get(f"/teams/{team['id']}").status_code == 404


def test_hackathon_crud(client, auth) -> None:
    payload = {"title": "Spring Jam", "start_date": "2024-04-01T09:00:00", "end_date": "2024-04-03T18:00:00"}

    assert client.post("/hackathons", json=payload, headers=auth("alice")).status_code == 403

    created = client.post("/hackathons", json=payload, headers=auth("host", UserRole.HOST))
    assert created.status_code == 201
    hackathon_id = created.json()["id"]

    assert client.post("/hackathons", json=payload, headers=auth("host", UserRole.HOST)).status_code == 409
    bad_dates = {"title": "Backwards", "start_date": "2024-05-03T00:00:00", "end_date": "2024-05-01T00:00:00"}
    assert client.post("/hackathons", json=bad_dates, headers=auth("host", UserRole.HOST)).status_code == 400

    assert [h["title"] for h in client.get("/hackathons").json()] == ["Spring Jam"]
    assert client.get(f"/hackathons/{hackathon_id}").json()["title"] == "Spring Jam"

    assert client.delete(f"/hackathons/{hackathon_id}", headers=auth("other_host", UserRole.HOST)).status_code == 403
    assert client.delete(f"/hackathons/{hackathon_id}", headers=auth("host", UserRole.HOST)).status_code == 204
    assert client.get(f"/hackathons/{hackathon_id}").status_code == 404


def test_upload_with_one_oversized_part_persists_nothing(client, auth, assets, hackathon_id) -> None:
    team = _create_team(client, auth, hackathon_id, "alice", "Rocket")

    response = client.post(
        f"/teams/{team['id']}/upload",
        files={
            "photo": ("logo.png", b"png-bytes", "image/png"),
            "file": ("big.bin", b"x" * (10 * 1024 * 1024 + 1), "application/octet-stream"),
        },
        headers=auth("alice"),
    )

    assert response.status_code == 400
    assert client.get(f"/teams/{team['id']}").json()["attachments"] == []
    assert assets.stored == []


def test_local_asset_urls_are_served(store, auth, hackathon_id, tmp_path: Path) -> None:
    upload_dir = tmp_path / "uploads"
    app = _test_app(store, LocalAssetStore(root=str(upload_dir), base_url="/uploads"), upload_dir)

    with TestClient(app) as local_client:
        team = _create_team(local_client, auth, hackathon_id, "alice", "Rocket")
        uploaded = local_client.post(
            f"/teams/{team['id']}/upload",
            files={"file": ("notes.txt", b"hello team", "text/plain")},
            headers=auth("alice"),
        )
        assert uploaded.status_code == 201
        url = uploaded.json()[0]["url"]

        served = local_client.get(url)

    assert url.startswith("/uploads/")
    assert served.status_code == 200
    assert served.content == b"hello team"


def test_update_hackathon(client, auth) -> None:
    host = auth("host", UserRole.HOST)
    payload = {"title": "Spring Jam", "start_date": "2024-04-01T09:00:00", "end_date": "2024-04-03T18:00:00"}
    hackathon_id = client.post("/hackathons", json=payload, headers=host).json()["id"]

    renamed = client.put(f"/hackathons/{hackathon_id}", json={"title": "Spring Jam 2024"}, headers=host)
    assert renamed.status_code == 200
    assert renamed.json()["title"] == "Spring Jam 2024"
    assert renamed.json()["start_date"] == "2024-04-01T09:00:00"

    backwards = client.put(f"/hackathons/{hackathon_id}", json={"start_date": "2024-05-01T00:00:00"}, headers=host)
    assert backwards.status_code == 400

    stranger = auth("other_host", UserRole.HOST)
    assert client.put(f"/hackathons/{hackathon_id}", json={"title": "Mine"}, headers=stranger).status_code == 403
    assert client.put(f"/hackathons/{hackathon_id}", json={"title": "Mine"}).status_code == 401
    assert client.put(f"/hackathons/{uuid4()}", json={"title": "Mine"}, headers=host).status_code == 404
