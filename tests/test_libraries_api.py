from __future__ import annotations

import logging
import os
from pathlib import Path

from fastapi.testclient import TestClient

import libvault.db.session as db_session_module
from libvault.api.app import create_app
from libvault.core.config import get_settings
from libvault.db.init_db import initialize_database
from libvault.users.service import UserService


def _prepare_env(tmp_path: Path) -> tuple[TestClient, dict[str, str], dict[str, str], int]:
    state_root = tmp_path / "state"
    state_root.mkdir(parents=True, exist_ok=True)
    os.environ["LIBVAULT_STATE_ROOT"] = state_root.as_posix()

    get_settings.cache_clear()
    db_session_module.reset_session_state()
    initialize_database()

    users = UserService(get_settings(), db_session_module.get_session_factory())
    admin = users.create_user(username="admin", first_name="Ada", last_name="Min")
    member = users.create_user(username="member", first_name="Mem", last_name="Ber")
    admin_headers = {"Authorization": f"Bearer {users.issue_token(admin.id)}"}
    member_headers = {"Authorization": f"Bearer {users.issue_token(member.id)}"}
    return TestClient(create_app()), admin_headers, member_headers, member.id


def test_health_and_current_user(tmp_path: Path) -> None:
    client, admin_headers, _, _ = _prepare_env(tmp_path)

    with client:
        health = client.get("/api/health")
    assert health.status_code == 200
    assert health.json()["status"] == "ok"
    assert health.json()["database"] == "ok"
    assert logging.getLogger().level == logging.INFO

    me = client.get("/api/user", headers=admin_headers)
    assert me.status_code == 200
    assert me.json() == {"id": 1, "username": "admin", "firstName": "Ada", "lastName": "Min", "isAdmin": True}

    assert client.get("/api/user").status_code == 401


def test_library_lifecycle(tmp_path: Path) -> None:
    client, admin_headers, member_headers, member_id = _prepare_env(tmp_path)
    root = tmp_path / "movies"
    root.mkdir()

    created = client.post(
        "/api/libraries",
        json={"name": "Movies", "type": "movies", "rootFolder": root.as_posix()},
        headers=admin_headers,
    )
    assert created.status_code == 201
    library = created.json()
    assert library["rootFolder"] == root.as_posix()
    assert library["type"] == "movies"

    hidden = client.get(f"/api/libraries/{library['id']}", headers=member_headers)
    assert hidden.status_code == 404
    assert client.get("/api/libraries", headers=member_headers).json() == {"elements": [], "totalElements": 0}

    shared = client.post(
        f"/api/libraries/{library['id']}/shares",
        json={"userId": member_id, "canWrite": True},
        headers=admin_headers,
    )
    assert shared.status_code == 204

    listing = client.get("/api/libraries", headers=member_headers)
    assert listing.json() == {
        "elements": [{"id": library["id"], "name": "Movies", "type": "movies", "canWrite": True}],
        "totalElements": 1,
    }

    details = client.get(f"/api/libraries/{library['id']}", headers=member_headers)
    assert details.status_code == 200
    assert details.json()["sharedWith"][0]["user"]["username"] == "member"
    assert details.json()["sharedWith"][0]["canWrite"] is True

    renamed = client.patch(f"/api/libraries/{library['id']}", json={"name": "Films"}, headers=member_headers)
    assert renamed.status_code == 200
    assert renamed.json()["name"] == "Films"
    assert renamed.json()["rootFolder"] == root.as_posix()

    member_delete = client.delete(f"/api/libraries/{library['id']}", headers=member_headers)
    assert member_delete.status_code == 404

    unshared = client.delete(f"/api/libraries/{library['id']}/shares/{member_id}", headers=admin_headers)
    assert unshared.status_code == 204
    assert client.get(f"/api/libraries/{library['id']}", headers=member_headers).status_code == 404

    deleted = client.delete(f"/api/libraries/{library['id']}", headers=admin_headers)
    assert deleted.status_code == 204
    assert root.exists()
    assert client.get(f"/api/libraries/{library['id']}", headers=admin_headers).status_code == 404


def test_create_library_is_admin_only_and_validated(tmp_path: Path) -> None:
    client, admin_headers, member_headers, _ = _prepare_env(tmp_path)
    root = tmp_path / "books"
    root.mkdir()
    payload = {"name": "Books", "type": "books", "rootFolder": root.as_posix()}

    assert client.post("/api/libraries", json=payload, headers=member_headers).status_code == 400
    missing_root = {**payload, "rootFolder": (tmp_path / "nope").as_posix()}
    assert client.post("/api/libraries", json=missing_root, headers=admin_headers).status_code == 400
    assert client.post("/api/libraries", json={**payload, "type": "comics"}, headers=admin_headers).status_code == 422
    assert client.post("/api/libraries", json=payload).status_code == 401
