"""Profile endpoints for the signed-in user and user administration for owners/admins."""

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlalchemy.orm import Session

from nhatroso.api.v1.auth import get_current_user, require_manager
from nhatroso.core.config import get_settings
from nhatroso.core.database import get_db
from nhatroso.schemas.auth import CurrentUser
from nhatroso.schemas.users import (
    ChangePasswordRequest,
    ProfileUpdate,
    UserResponse,
    UsersListResponse,
    UserUpdate,
)
from nhatroso.services import users as users_service
from nhatroso.services.users import IncorrectPasswordError, UserNotFoundError

router = APIRouter()


def _not_found(e: UserNotFoundError) -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=e.message)


def _forbid_self_lockout(manager: CurrentUser, user_id: int) -> None:
    if manager.id == user_id:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Managers cannot deactivate, re-role or delete their own account",
        )


@router.get("/profile", response_model=UserResponse)
def get_profile(
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
) -> UserResponse:
    try:
        user = users_service.require_user(db, current_user.id)
    except UserNotFoundError as e:
        raise _not_found(e) from e
    return UserResponse.model_validate(user)


@router.put("/profile", response_model=UserResponse)
def update_profile(
    body: ProfileUpdate,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
) -> UserResponse:
    try:
        user = users_service.update_user(
            db, current_user.id, full_name=body.full_name, phone=body.phone
        )
    except UserNotFoundError as e:
        raise _not_found(e) from e
    return UserResponse.model_validate(user)


@router.put("/change-password", status_code=status.HTTP_204_NO_CONTENT)
def change_password(
    body: ChangePasswordRequest,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
) -> Response:
    try:
        users_service.change_password(
            db, current_user.id, body.current_password, body.new_password, get_settings()
        )
    except IncorrectPasswordError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=e.message) from e
    except UserNotFoundError as e:
        raise _not_found(e) from e
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("", response_model=UsersListResponse)
def list_users(
    _manager: Annotated[CurrentUser, Depends(require_manager)],
    db: Annotated[Session, Depends(get_db)],
) -> UsersListResponse:
    """List all live users (owner/admin only)."""
    users = users_service.list_users(db)
    return UsersListResponse(users=[UserResponse.model_validate(u) for u in users])


@router.get("/{user_id}", response_model=UserResponse)
def get_user(
    user_id: int,
    _manager: Annotated[CurrentUser, Depends(require_manager)],
    db: Annotated[Session, Depends(get_db)],
) -> UserResponse:
    try:
        return UserResponse.model_validate(users_service.require_user(db, user_id))
    except UserNotFoundError as e:
        raise _not_found(e) from e


@router.put("/{user_id}", response_model=UserResponse)
def update_user(
    user_id: int,
    body: UserUpdate,
    manager: Annotated[CurrentUser, Depends(require_manager)],
    db: Annotated[Session, Depends(get_db)],
) -> UserResponse:
    """Update any account. Setting isActive=false also ends that user's session."""
    if body.is_active is False or (body.role is not None and body.role.value != manager.role):
        _forbid_self_lockout(manager, user_id)
    try:
        user = users_service.update_user(
            db,
            user_id,
            full_name=body.full_name,
            phone=body.phone,
            is_active=body.is_active,
            role=body.role,
        )
    except UserNotFoundError as e:
        raise _not_found(e) from e
    return UserResponse.model_validate(user)


@router.delete("/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_user(
    user_id: int,
    manager: Annotated[CurrentUser, Depends(require_manager)],
    db: Annotated[Session, Depends(get_db)],
) -> Response:
    """Soft-delete an account; the row is kept with isDeleted set."""
    _forbid_self_lockout(manager, user_id)
    try:
        users_service.soft_delete_user(db, user_id)
    except UserNotFoundError as e:
        raise _not_found(e) from e
    return Response(status_code=status.HTTP_204_NO_CONTENT)
