from __future__ import annotations

from fastapi import APIRouter, Depends, Query, Response, status

from libvault.api.deps import get_current_user, get_user_service, require_admin
from libvault.api.errors import DOMAIN_ERRORS, http_error_for
from libvault.api.schemas.users import (
    CreateUserRequest,
    TokenResponse,
    UpdateUserRequest,
    UserPageResponse,
    UserResponse,
)
from libvault.users.service import UserService
from libvault.users.types import UserSnapshot

router = APIRouter(tags=["users"])


def user_to_response(user: UserSnapshot) -> UserResponse:
    return UserResponse(
        id=user.id,
        username=user.username,
        first_name=user.first_name,
        last_name=user.last_name,
        is_admin=user.is_admin,
    )


def _apply_update(service: UserService, user_id: int, request: UpdateUserRequest) -> UserResponse:
    try:
        updated = service.update_user(
            user_id,
            username=request.username,
            first_name=request.first_name,
            last_name=request.last_name,
        )
    except DOMAIN_ERRORS as exc:
        raise http_error_for(exc) from exc
    return user_to_response(updated)


@router.get("/user", response_model=UserResponse)
def get_current_user_profile(user: UserSnapshot = Depends(get_current_user)) -> UserResponse:
    return user_to_response(user)


@router.patch("/user", response_model=UserResponse)
def update_current_user_profile(
    request: UpdateUserRequest,
    user: UserSnapshot = Depends(get_current_user),
    service: UserService = Depends(get_user_service),
) -> UserResponse:
    return _apply_update(service, user.id, request)


@router.get("/users", response_model=UserPageResponse)
def list_users(
    page: int = Query(default=1, ge=1),
    limit: int | None = Query(default=None, ge=1),
    _admin: UserSnapshot = Depends(require_admin),
    service: UserService = Depends(get_user_service),
) -> UserPageResponse:
    result = service.list_users(page=page, limit=limit)
    return UserPageResponse(
        elements=[user_to_response(item) for item in result.elements],
        total_elements=result.total_elements,
    )


@router.post("/users", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
def create_user(
    request: CreateUserRequest,
    _admin: UserSnapshot = Depends(require_admin),
    service: UserService = Depends(get_user_service),
) -> UserResponse:
    try:
        created = service.create_user(
            username=request.username,
            first_name=request.first_name,
            last_name=request.last_name,
        )
    except DOMAIN_ERRORS as exc:
        raise http_error_for(exc) from exc
    return user_to_response(created)


@router.get("/users/{user_id}", response_model=UserResponse)
def get_user(
    user_id: int,
    _admin: UserSnapshot = Depends(require_admin),
    service: UserService = Depends(get_user_service),
) -> UserResponse:
    try:
        return user_to_response(service.get_user(user_id))
    except DOMAIN_ERRORS as exc:
        raise http_error_for(exc) from exc


@router.patch("/users/{user_id}", response_model=UserResponse)
def update_user(
    user_id: int,
    request: UpdateUserRequest,
    _admin: UserSnapshot = Depends(require_admin),
    service: UserService = Depends(get_user_service),
) -> UserResponse:
    return _apply_update(service, user_id, request)


@router.delete("/users/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_user(
    user_id: int,
    admin: UserSnapshot = Depends(require_admin),
    service: UserService = Depends(get_user_service),
) -> Response:
    try:
        service.delete_user(admin, user_id)
    except DOMAIN_ERRORS as exc:
        raise http_error_for(exc) from exc
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/users/{user_id}/tokens", response_model=TokenResponse, status_code=status.HTTP_201_CREATED)
def issue_user_token(
    user_id: int,
    _admin: UserSnapshot = Depends(require_admin),
    service: UserService = Depends(get_user_service),
) -> TokenResponse:
    try:
        return TokenResponse(token=service.issue_token(user_id))
    except DOMAIN_ERRORS as exc:
        raise http_error_for(exc) from exc
