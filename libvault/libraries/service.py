from __future__ import annotations

import logging
import os
from pathlib import Path

from sqlalchemy import func, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, sessionmaker

from libvault.core.config import Settings
from libvault.db.models import Library, LibraryShare, LibraryType, User
from libvault.libraries.access import AccessGate, AccessRight, is_owner_or_admin, require_access
from libvault.libraries.types import (
    LibraryDetails,
    LibraryPage,
    LibraryShareSnapshot,
    LibrarySnapshot,
    LibrarySummary,
)
from libvault.users.service import user_to_snapshot
from libvault.users.types import UserSnapshot

logger = logging.getLogger(__name__)


class LibraryNotFoundError(RuntimeError):
    pass


class LibraryPolicyError(RuntimeError):
    pass


def library_to_snapshot(item: Library) -> LibrarySnapshot:
    return LibrarySnapshot(
        id=item.id,
        name=item.name,
        type=item.type,
        root_folder=Path(item.root_folder),
        owner_id=item.owner_id,
    )


class LibraryService:
    def __init__(self, settings: Settings, session_factory: sessionmaker[Session], gate: AccessGate):
        self._settings = settings
        self._session_factory = session_factory
        self._gate = gate

    def _normalize_limit(self, limit: int | None) -> int:
        if limit is None:
            return int(self._settings.default_page_size)
        return max(1, min(int(limit), int(self._settings.max_page_size)))

    def _normalize_name(self, name: str) -> str:
        normalized = name.strip()
        if not normalized:
            raise LibraryPolicyError("Library name must not be empty")
        return normalized

    def _normalize_root_folder(self, raw_root: str) -> str:
        if "~" in raw_root or "$" in raw_root:
            raise LibraryPolicyError("Root folder must not use home or environment expansion")
        if not os.path.isabs(raw_root):
            raise LibraryPolicyError("Root folder must be an absolute path")
        normalized = os.path.normpath(raw_root)
        if self._settings.require_existing_library_root and not os.path.isdir(normalized):
            raise LibraryPolicyError(f"Root folder is not a directory: {normalized}")
        return normalized

    def _load(self, session: Session, library_id: int) -> Library:
        item = session.get(Library, library_id)
        if item is None:
            raise LibraryNotFoundError(f"Library not found: {library_id}")
        return item

    def create_library(
        self,
        user: UserSnapshot,
        *,
        name: str,
        root_folder: str,
        library_type: LibraryType = LibraryType.GENERIC,
    ) -> LibrarySnapshot:
        if not user.is_admin:
            raise LibraryPolicyError("Only administrators can create libraries")

        item = Library(
            name=self._normalize_name(name),
            type=library_type,
            root_folder=self._normalize_root_folder(root_folder),
            owner_id=user.id,
        )
        with self._session_factory() as session:
            session.add(item)
            try:
                session.commit()
            except IntegrityError as exc:
                session.rollback()
                raise LibraryPolicyError(f"Root folder already used by another library: {item.root_folder}") from exc
            session.refresh(item)
            logger.info("Created library %s (id=%s) at %s", item.name, item.id, item.root_folder)
            return library_to_snapshot(item)

    def get_library(self, user: UserSnapshot, library_id: int) -> LibrarySnapshot:
        require_access(self._gate, user, library_id, AccessRight.READ)
        with self._session_factory() as session:
            return library_to_snapshot(self._load(session, library_id))

    def get_library_details(self, user: UserSnapshot, library_id: int) -> LibraryDetails:
        require_access(self._gate, user, library_id, AccessRight.READ)
        with self._session_factory() as session:
            item = self._load(session, library_id)
            rows = session.execute(
                select(LibraryShare, User)
                .join(User, User.id == LibraryShare.user_id)
                .where(LibraryShare.library_id == library_id)
                .order_by(User.username.asc())
            ).all()
            return LibraryDetails(
                library=library_to_snapshot(item),
                shared_with=[
                    LibraryShareSnapshot(user=user_to_snapshot(shared_user), can_write=share.can_write)
                    for share, shared_user in rows
                ],
            )

    def list_libraries(self, user: UserSnapshot, *, page: int = 1, limit: int | None = None) -> LibraryPage:
        bounded_limit = self._normalize_limit(limit)
        offset = (max(1, int(page)) - 1) * bounded_limit

        with self._session_factory() as session:
            query = select(Library, LibraryShare.can_write).outerjoin(
                LibraryShare,
                (LibraryShare.library_id == Library.id) & (LibraryShare.user_id == user.id),
            )
            if not user.is_admin:
                query = query.where(or_(Library.owner_id == user.id, LibraryShare.id.is_not(None)))

            total = int(session.scalar(select(func.count()).select_from(query.subquery())) or 0)
            rows = session.execute(
                query.order_by(Library.name.asc(), Library.id.asc()).offset(offset).limit(bounded_limit)
            ).all()

        elements = [
            LibrarySummary(
                id=item.id,
                name=item.name,
                type=item.type,
                can_write=is_owner_or_admin(user, item.owner_id) or bool(can_write),
            )
            for item, can_write in rows
        ]
        return LibraryPage(elements=elements, total_elements=total)

    def rename_library(self, user: UserSnapshot, library_id: int, *, name: str) -> LibrarySnapshot:
        require_access(self._gate, user, library_id, AccessRight.WRITE)
        normalized = self._normalize_name(name)
        with self._session_factory() as session:
            item = self._load(session, library_id)
            item.name = normalized
            session.commit()
            session.refresh(item)
            return library_to_snapshot(item)

    def delete_library(self, user: UserSnapshot, library_id: int) -> None:
        """Forget a library. Files under its root folder stay on disk."""
        require_access(self._gate, user, library_id, AccessRight.MANAGE)
        with self._session_factory() as session:
            item = self._load(session, library_id)
            session.delete(item)
            session.commit()
        logger.info("Deleted library %s", library_id)

    def share_library(self, user: UserSnapshot, library_id: int, *, target_user_id: int, can_write: bool) -> None:
        require_access(self._gate, user, library_id, AccessRight.MANAGE)
        with self._session_factory() as session:
            item = self._load(session, library_id)
            if session.get(User, target_user_id) is None:
                raise LibraryPolicyError(f"User not found: {target_user_id}")
            if item.owner_id == target_user_id:
                raise LibraryPolicyError("Library is already owned by this user")

            share = session.scalar(
                select(LibraryShare).where(
                    LibraryShare.library_id == library_id,
                    LibraryShare.user_id == target_user_id,
                )
            )
            if share is None:
                session.add(LibraryShare(library_id=library_id, user_id=target_user_id, can_write=can_write))
            else:
                share.can_write = can_write
            session.commit()
        logger.info("Shared library %s with user %s (can_write=%s)", library_id, target_user_id, can_write)

    def unshare_library(self, user: UserSnapshot, library_id: int, *, target_user_id: int) -> None:
        require_access(self._gate, user, library_id, AccessRight.MANAGE)
        with self._session_factory() as session:
            self._load(session, library_id)
            share = session.scalar(
                select(LibraryShare).where(
                    LibraryShare.library_id == library_id,
                    LibraryShare.user_id == target_user_id,
                )
            )
            if share is not None:
                session.delete(share)
                session.commit()
        logger.info("Unshared library %s from user %s", library_id, target_user_id)
