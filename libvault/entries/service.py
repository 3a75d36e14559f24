from __future__ import annotations

import logging

from sqlalchemy.orm import Session, sessionmaker

from libvault.core.config import Settings
from libvault.core.path_safety import ResolvedPath, resolve_under_root
from libvault.db.models import Library
from libvault.entries.accessor import EntryAccessor, EntryDownload
from libvault.entries.lister import EntryLister
from libvault.entries.types import FileInfo
from libvault.libraries.access import AccessGate, AccessRight, require_access
from libvault.libraries.service import LibraryNotFoundError
from libvault.users.types import UserSnapshot

logger = logging.getLogger(__name__)


class EntryService:
    """Library-confined file operations for an authenticated user.

    Every call checks the access gate first, then resolves the caller's path
    against the library root; raw strings never reach the filesystem.
    """

    def __init__(
        self,
        settings: Settings,
        session_factory: sessionmaker[Session],
        gate: AccessGate,
        *,
        lister: EntryLister | None = None,
        accessor: EntryAccessor | None = None,
    ):
        self._settings = settings
        self._session_factory = session_factory
        self._gate = gate
        self._lister = lister or EntryLister()
        self._accessor = accessor or EntryAccessor()

    def _resolve(self, user: UserSnapshot, library_id: int, right: AccessRight, raw_path: str | None) -> ResolvedPath:
        require_access(self._gate, user, library_id, right)
        with self._session_factory() as session:
            library = session.get(Library, library_id)
            if library is None:
                raise LibraryNotFoundError(f"Library not found: {library_id}")
            root_folder = library.root_folder
        return resolve_under_root(root_folder, raw_path)

    def list_entries(
        self,
        user: UserSnapshot,
        library_id: int,
        *,
        parent: str | None = None,
        path: str | None = None,
    ) -> list[FileInfo]:
        if path is not None:
            return self._lister.describe(self._resolve(user, library_id, AccessRight.READ, path))
        return self._lister.list(self._resolve(user, library_id, AccessRight.READ, parent))

    def open_entry(self, user: UserSnapshot, library_id: int, path: str) -> EntryDownload:
        resolved = self._resolve(user, library_id, AccessRight.READ, path)
        return self._accessor.open(resolved)

    def delete_entry(self, user: UserSnapshot, library_id: int, path: str) -> bool:
        resolved = self._resolve(user, library_id, AccessRight.WRITE, path)
        removed = self._accessor.remove(resolved)
        if removed:
            logger.info("User %s deleted %s from library %s", user.id, resolved.relative, library_id)
        return removed
