from __future__ import annotations

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from libvault.core.config import get_settings
from libvault.db.session import get_session_factory
from libvault.entries.service import EntryService
from libvault.libraries.access import DatabaseAccessGate
from libvault.libraries.service import LibraryService
from libvault.users.service import UserService
from libvault.users.types import UserSnapshot

_bearer = HTTPBearer(auto_error=False)


def get_user_service() -> UserService:
    return UserService(settings=get_settings(), session_factory=get_session_factory())


def get_access_gate() -> DatabaseAccessGate:
    return DatabaseAccessGate(session_factory=get_session_factory())


def get_library_service(gate: DatabaseAccessGate = Depends(get_access_gate)) -> LibraryService:
    return LibraryService(settings=get_settings(), session_factory=get_session_factory(), gate=gate)


def get_entry_service(gate: DatabaseAccessGate = Depends(get_access_gate)) -> EntryService:
    return EntryService(settings=get_settings(), session_factory=get_session_factory(), gate=gate)


def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(_bearer),
    users: UserService = Depends(get_user_service),
) -> UserSnapshot:
    user = users.authenticate(credentials.credentials) if credentials is not None else None
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return user


def require_admin(user: UserSnapshot = Depends(get_current_user)) -> UserSnapshot:
    if not user.is_admin:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Administrator access required")
    return user
