from __future__ import annotations

import os
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest
from sqlalchemy import select, update

import libvault.db.session as db_session_module
from libvault.core.config import get_settings
from libvault.db.init_db import initialize_database
from libvault.db.models import ApiToken
from libvault.libraries.access import AccessRight, DatabaseAccessGate
from libvault.libraries.service import LibraryService
from libvault.users.service import (
    UsernameTakenError,
    UserNotFoundError,
    UserPolicyError,
    UserService,
    hash_token,
)


def make_services(tmp_path: Path) -> tuple[UserService, LibraryService, DatabaseAccessGate]:
    state_root = tmp_path / "state"
    state_root.mkdir(parents=True, exist_ok=True)
    os.environ["LIBVAULT_STATE_ROOT"] = state_root.as_posix()

    get_settings.cache_clear()
    db_session_module.reset_session_state()
    initialize_database()

    settings = get_settings()
    session_factory = db_session_module.get_session_factory()
    gate = DatabaseAccessGate(session_factory)
    return UserService(settings, session_factory), LibraryService(settings, session_factory, gate), gate


def test_list_users_pages_by_username(tmp_path: Path) -> None:
    users, _, _ = make_services(tmp_path)
    for username in ["zoe", "admin", "mia", "bob"]:
        users.create_user(username=username, first_name="", last_name="")

    first = users.list_users(limit=3)
    second = users.list_users(page=2, limit=3)

    assert first.total_elements == 4
    assert [item.username for item in first.elements] == ["admin", "bob", "mia"]
    assert [item.username for item in second.elements] == ["zoe"]


def test_update_user_changes_only_given_fields(tmp_path: Path) -> None:
    users, _, _ = make_services(tmp_path)
    admin = users.create_user(username="admin", first_name="Ada", last_name="Min")
    member = users.create_user(username="member", first_name="Mem", last_name="Ber")

    updated = users.update_user(member.id, first_name=" Memo ")

    assert updated.username == "member"
    assert updated.first_name == "Memo"
    assert updated.last_name == "Ber"
    assert not updated.is_admin
    assert users.get_user(member.id) == updated

    with pytest.raises(UsernameTakenError):
        users.update_user(member.id, username=admin.username)
    with pytest.raises(UserPolicyError):
        users.update_user(member.id, username="   ")
    with pytest.raises(UserNotFoundError):
        users.update_user(9999, first_name="Ghost")
    assert users.get_user(member.id).username == "member"


def test_delete_user_drops_tokens_and_shares(tmp_path: Path) -> None:
    users, libraries, gate = make_services(tmp_path)
    admin = users.create_user(username="admin", first_name="Ada", last_name="Min")
    member = users.create_user(username="member", first_name="Mem", last_name="Ber")
    root = tmp_path / "music"
    root.mkdir()
    library = libraries.create_library(admin, name="Music", root_folder=root.as_posix())
    libraries.share_library(admin, library.id, target_user_id=member.id, can_write=True)
    token = users.issue_token(member.id)

    with pytest.raises(UserPolicyError):
        users.delete_user(admin, admin.id)

    users.delete_user(admin, member.id)

    assert users.authenticate(token) is None
    assert libraries.get_library_details(admin, library.id).shared_with == []
    assert not gate.check(member, library.id, AccessRight.READ)
    with pytest.raises(UserNotFoundError):
        users.get_user(member.id)
    with pytest.raises(UserNotFoundError):
        users.delete_user(admin, member.id)


def test_authenticate_records_use_at_most_once_per_interval(tmp_path: Path) -> None:
    users, _, _ = make_services(tmp_path)
    admin = users.create_user(username="admin", first_name="Ada", last_name="Min")
    token = users.issue_token(admin.id)
    session_factory = db_session_module.get_session_factory()

    def last_used() -> datetime | None:
        with session_factory() as session:
            return session.scalar(select(ApiToken.last_used_at).where(ApiToken.token_hash == hash_token(token)))

    assert last_used() is None

    users.authenticate(token)
    first_use = last_used()
    assert first_use is not None

    users.authenticate(token)
    assert last_used() == first_use

    stale = datetime.now(tz=timezone.utc) - timedelta(hours=1)
    with session_factory() as session:
        session.execute(update(ApiToken).values(last_used_at=stale))
        session.commit()

    assert users.authenticate(token) == admin
    refreshed = last_used()
    assert refreshed is not None
    assert refreshed.replace(tzinfo=timezone.utc) > stale + timedelta(minutes=30)
