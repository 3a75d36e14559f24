from __future__ import annotations

import logging
from enum import Enum
from typing import Protocol

from sqlalchemy import select
from sqlalchemy.orm import Session, sessionmaker

from libvault.db.models import Library, LibraryShare
from libvault.users.types import UserSnapshot

logger = logging.getLogger(__name__)


class AccessRight(str, Enum):
    READ = "read"
    WRITE = "write"
    MANAGE = "manage"


class AccessDeniedError(RuntimeError):
    pass


class AccessGate(Protocol):
    def check(self, user: UserSnapshot, library_id: int, right: AccessRight) -> bool: ...


def is_owner_or_admin(user: UserSnapshot, owner_id: int | None) -> bool:
    return user.is_admin or (owner_id is not None and owner_id == user.id)


class DatabaseAccessGate:
    """Answers access questions from the library and share tables.

    Admins and the library owner are always allowed. Everyone else needs a
    share row; ``write`` additionally needs ``can_write`` and ``manage`` is
    never granted through a share.
    """

    def __init__(self, session_factory: sessionmaker[Session]):
        self._session_factory = session_factory

    def check(self, user: UserSnapshot, library_id: int, right: AccessRight) -> bool:
        with self._session_factory() as session:
            owner_row = session.execute(select(Library.owner_id).where(Library.id == library_id)).first()
            if owner_row is None:
                return False
            if is_owner_or_admin(user, owner_row.owner_id):
                return True
            if right == AccessRight.MANAGE:
                return False

            share = session.scalar(
                select(LibraryShare).where(
                    LibraryShare.library_id == library_id,
                    LibraryShare.user_id == user.id,
                )
            )

        if share is None:
            return False
        if right == AccessRight.WRITE:
            return share.can_write
        return True


def require_access(gate: AccessGate, user: UserSnapshot, library_id: int, right: AccessRight) -> None:
    if not gate.check(user, library_id, right):
        logger.info("Denied %s access to library %s for user %s", right.value, library_id, user.id)
        raise AccessDeniedError(f"Library not found: {library_id}")
