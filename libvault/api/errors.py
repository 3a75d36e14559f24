from __future__ import annotations

from fastapi import HTTPException, status

from libvault.core.path_safety import PathTraversalError
from libvault.entries.accessor import EntryNotFoundError, InvalidOperationError
from libvault.libraries.access import AccessDeniedError
from libvault.libraries.service import LibraryNotFoundError, LibraryPolicyError
from libvault.users.service import UsernameTakenError, UserNotFoundError, UserPolicyError

# Denied, escaping and missing targets must be indistinguishable to clients.
_NOT_FOUND_ERRORS = (
    PathTraversalError,
    AccessDeniedError,
    LibraryNotFoundError,
    EntryNotFoundError,
    UserNotFoundError,
)
_CONFLICT_ERRORS = (UsernameTakenError,)
_BAD_REQUEST_ERRORS = (InvalidOperationError, LibraryPolicyError, UserPolicyError)

DOMAIN_ERRORS = (*_NOT_FOUND_ERRORS, *_CONFLICT_ERRORS, *_BAD_REQUEST_ERRORS)


def http_error_for(exc: Exception) -> HTTPException:
    if isinstance(exc, _NOT_FOUND_ERRORS):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Not found")
    if isinstance(exc, _CONFLICT_ERRORS):
        return HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc))
    if isinstance(exc, _BAD_REQUEST_ERRORS):
        return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))
    return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Internal error")


def missing_parameter(name: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=f"Missing required parameter: {name}")
