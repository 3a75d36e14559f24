from __future__ import annotations

import hashlib
import logging
import secrets
from datetime import datetime, timedelta, timezone

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, sessionmaker

from libvault.core.config import Settings
from libvault.db.models import ApiToken, User
from libvault.users.types import UserPage, UserSnapshot

logger = logging.getLogger(__name__)

_TOKEN_BYTES = 32
_TOKEN_TOUCH_INTERVAL = timedelta(minutes=1)


class UserNotFoundError(RuntimeError):
    pass


class UserPolicyError(RuntimeError):
    pass


class UsernameTakenError(UserPolicyError):
    pass


def hash_token(token: str) -> str:
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


def user_to_snapshot(item: User) -> UserSnapshot:
    return UserSnapshot(
        id=item.id,
        username=item.username,
        first_name=item.first_name,
        last_name=item.last_name,
        is_admin=item.is_admin,
    )


def _as_utc(value: datetime) -> datetime:
    # SQLite hands timestamps back without tzinfo.
    return value if value.tzinfo is not None else value.replace(tzinfo=timezone.utc)


class UserService:
    def __init__(self, settings: Settings, session_factory: sessionmaker[Session]):
        self._settings = settings
        self._session_factory = session_factory

    def _now(self) -> datetime:
        return datetime.now(tz=timezone.utc)

    def _normalize_limit(self, limit: int | None) -> int:
        if limit is None:
            return int(self._settings.default_page_size)
        return max(1, min(int(limit), int(self._settings.max_page_size)))

    def _normalize_username(self, username: str) -> str:
        normalized = username.strip()
        if not normalized:
            raise UserPolicyError("username must not be empty")
        return normalized

    def _load(self, session: Session, user_id: int) -> User:
        item = session.get(User, user_id)
        if item is None:
            raise UserNotFoundError(f"User not found: {user_id}")
        return item

    def create_user(self, *, username: str, first_name: str, last_name: str) -> UserSnapshot:
        normalized = self._normalize_username(username)

        with self._session_factory() as session:
            # The first account on a fresh install administers everything else.
            existing_count = int(session.scalar(select(func.count()).select_from(User)) or 0)
            item = User(
                username=normalized,
                first_name=first_name.strip(),
                last_name=last_name.strip(),
                is_admin=existing_count == 0,
            )
            session.add(item)
            try:
                session.commit()
            except IntegrityError as exc:
                session.rollback()
                raise UsernameTakenError(f"Username already taken: {normalized}") from exc
            session.refresh(item)
            logger.info("Created user %s (id=%s, admin=%s)", item.username, item.id, item.is_admin)
            return user_to_snapshot(item)

    def get_user(self, user_id: int) -> UserSnapshot:
        with self._session_factory() as session:
            return user_to_snapshot(self._load(session, user_id))

    def list_users(self, *, page: int = 1, limit: int | None = None) -> UserPage:
        bounded_limit = self._normalize_limit(limit)
        offset = (max(1, int(page)) - 1) * bounded_limit

        with self._session_factory() as session:
            total = int(session.scalar(select(func.count()).select_from(User)) or 0)
            rows = session.scalars(
                select(User).order_by(User.username.asc(), User.id.asc()).offset(offset).limit(bounded_limit)
            ).all()
            return UserPage(elements=[user_to_snapshot(item) for item in rows], total_elements=total)

    def update_user(
        self,
        user_id: int,
        *,
        username: str | None = None,
        first_name: str | None = None,
        last_name: str | None = None,
    ) -> UserSnapshot:
        """Apply the given profile changes. ``None`` leaves a field as it is."""
        with self._session_factory() as session:
            item = self._load(session, user_id)
            if username is not None:
                item.username = self._normalize_username(username)
            if first_name is not None:
                item.first_name = first_name.strip()
            if last_name is not None:
                item.last_name = last_name.strip()
            try:
                session.commit()
            except IntegrityError as exc:
                session.rollback()
                raise UsernameTakenError(f"Username already taken: {username}") from exc
            session.refresh(item)
            return user_to_snapshot(item)

    def delete_user(self, actor: UserSnapshot, user_id: int) -> None:
        """Remove an account with its tokens and shares.

        Libraries it owned stay in place without an owner.
        """
        if actor.id == user_id:
            raise UserPolicyError("Users cannot delete their own account")
        with self._session_factory() as session:
            item = self._load(session, user_id)
            session.delete(item)
            session.commit()
        logger.info("Deleted user %s", user_id)

    def issue_token(self, user_id: int) -> str:
        token = secrets.token_urlsafe(_TOKEN_BYTES)
        with self._session_factory() as session:
            self._load(session, user_id)
            session.add(ApiToken(user_id=user_id, token_hash=hash_token(token)))
            session.commit()
        return token

    def authenticate(self, token: str) -> UserSnapshot | None:
        if not token:
            return None
        with self._session_factory() as session:
            row = session.scalar(select(ApiToken).where(ApiToken.token_hash == hash_token(token)))
            if row is None:
                return None
            user = session.get(User, row.user_id)
            if user is None:
                return None
            now = self._now()
            if row.last_used_at is None or now - _as_utc(row.last_used_at) >= _TOKEN_TOUCH_INTERVAL:
                row.last_used_at = now
                session.commit()
            return user_to_snapshot(user)
