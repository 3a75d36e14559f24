from __future__ import annotations

from fastapi import APIRouter, Depends, Query, Response, status

from libvault.api.deps import get_current_user, get_library_service
from libvault.api.errors import DOMAIN_ERRORS, http_error_for
from libvault.api.routes.users import user_to_response
from libvault.api.schemas.libraries import (
    CreateLibraryRequest,
    LibraryDetailsResponse,
    LibraryPageResponse,
    LibraryResponse,
    LibrarySummaryResponse,
    ShareLibraryRequest,
    ShareResponse,
    UpdateLibraryRequest,
)
from libvault.libraries.service import LibraryService
from libvault.libraries.types import LibraryDetails, LibrarySnapshot
from libvault.users.types import UserSnapshot

router = APIRouter(prefix="/libraries", tags=["libraries"])


def library_to_response(library: LibrarySnapshot) -> LibraryResponse:
    return LibraryResponse(
        id=library.id,
        name=library.name,
        type=library.type,
        root_folder=library.root_folder.as_posix(),
    )


def library_details_to_response(details: LibraryDetails) -> LibraryDetailsResponse:
    library = details.library
    return LibraryDetailsResponse(
        id=library.id,
        name=library.name,
        type=library.type,
        root_folder=library.root_folder.as_posix(),
        shared_with=[
            ShareResponse(can_write=share.can_write, user=user_to_response(share.user)) for share in details.shared_with
        ],
    )


@router.get("", response_model=LibraryPageResponse)
def list_libraries(
    page: int = Query(default=1, ge=1),
    limit: int | None = Query(default=None, ge=1),
    user: UserSnapshot = Depends(get_current_user),
    service: LibraryService = Depends(get_library_service),
) -> LibraryPageResponse:
    result = service.list_libraries(user, page=page, limit=limit)
    return LibraryPageResponse(
        elements=[
            LibrarySummaryResponse(id=item.id, name=item.name, type=item.type, can_write=item.can_write)
            for item in result.elements
        ],
        total_elements=result.total_elements,
    )


@router.post("", response_model=LibraryResponse, status_code=status.HTTP_201_CREATED)
def create_library(
    request: CreateLibraryRequest,
    user: UserSnapshot = Depends(get_current_user),
    service: LibraryService = Depends(get_library_service),
) -> LibraryResponse:
    try:
        library = service.create_library(
            user,
            name=request.name,
            root_folder=request.root_folder,
            library_type=request.type,
        )
    except DOMAIN_ERRORS as exc:
        raise http_error_for(exc) from exc
    return library_to_response(library)


@router.get("/{library_id}", response_model=LibraryDetailsResponse)
def get_library(
    library_id: int,
    user: UserSnapshot = Depends(get_current_user),
    service: LibraryService = Depends(get_library_service),
) -> LibraryDetailsResponse:
    try:
        details = service.get_library_details(user, library_id)
    except DOMAIN_ERRORS as exc:
        raise http_error_for(exc) from exc
    return library_details_to_response(details)


@router.patch("/{library_id}", response_model=LibraryResponse)
def update_library(
    library_id: int,
    request: UpdateLibraryRequest,
    user: UserSnapshot = Depends(get_current_user),
    service: LibraryService = Depends(get_library_service),
) -> LibraryResponse:
    try:
        if request.name is None:
            library = service.get_library(user, library_id)
        else:
            library = service.rename_library(user, library_id, name=request.name)
    except DOMAIN_ERRORS as exc:
        raise http_error_for(exc) from exc
    return library_to_response(library)


@router.delete("/{library_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_library(
    library_id: int,
    user: UserSnapshot = Depends(get_current_user),
    service: LibraryService = Depends(get_library_service),
) -> Response:
    try:
        service.delete_library(user, library_id)
    except DOMAIN_ERRORS as exc:
        raise http_error_for(exc) from exc
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/{library_id}/shares", status_code=status.HTTP_204_NO_CONTENT)
def share_library(
    library_id: int,
    request: ShareLibraryRequest,
    user: UserSnapshot = Depends(get_current_user),
    service: LibraryService = Depends(get_library_service),
) -> Response:
    try:
        service.share_library(user, library_id, target_user_id=request.user_id, can_write=request.can_write)
    except DOMAIN_ERRORS as exc:
        raise http_error_for(exc) from exc
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.delete("/{library_id}/shares/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
def unshare_library(
    library_id: int,
    user_id: int,
    user: UserSnapshot = Depends(get_current_user),
    service: LibraryService = Depends(get_library_service),
) -> Response:
    try:
        service.unshare_library(user, library_id, target_user_id=user_id)
    except DOMAIN_ERRORS as exc:
        raise http_error_for(exc) from exc
    return Response(status_code=status.HTTP_204_NO_CONTENT)
