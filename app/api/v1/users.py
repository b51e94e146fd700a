"""User management endpoints. Permission checks happen in the authorization gate."""

from typing import Annotated

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from app.api.v1.auth import get_current_principal
from app.core.database import get_db
from app.schemas.users import (
    DeleteResponse,
    UpdateRolesRequest,
    UserCreateRequest,
    UserResponse,
    UsersListResponse,
    UserUpdateRequest,
)
from app.services.authorization import Principal
from app.services.users import UserService

router = APIRouter()


@router.get("", response_model=UsersListResponse)
def list_users(db: Annotated[Session, Depends(get_db)]) -> UsersListResponse:
    users = UserService(db).find_all_users()
    return UsersListResponse(users=[UserResponse.from_user(u) for u in users])


@router.get("/me", response_model=UserResponse)
def get_me(
    principal: Annotated[Principal, Depends(get_current_principal)],
    db: Annotated[Session, Depends(get_db)],
) -> UserResponse:
    """Profile of the caller; needs a valid token but no permission."""
    return UserResponse.from_user(UserService(db).find_one_user(principal.user_id))


@router.get("/{user_id}", response_model=UserResponse)
def get_user(user_id: int, db: Annotated[Session, Depends(get_db)]) -> UserResponse:
    return UserResponse.from_user(UserService(db).find_one_user(user_id))


@router.post("", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
def create_user(
    body: UserCreateRequest,
    db: Annotated[Session, Depends(get_db)],
) -> UserResponse:
    return UserResponse.from_user(UserService(db).create_user(body))


@router.put("/{user_id}", response_model=UserResponse)
def update_user(
    user_id: int,
    body: UserUpdateRequest,
    db: Annotated[Session, Depends(get_db)],
) -> UserResponse:
    return UserResponse.from_user(UserService(db).update_user(user_id, body))


@router.put("/{user_id}/roles/{role_id}", response_model=UserResponse)
def add_role_to_user(
    user_id: int,
    role_id: int,
    db: Annotated[Session, Depends(get_db)],
) -> UserResponse:
    return UserResponse.from_user(UserService(db).add_role_to_user(user_id, role_id))


@router.put("/{user_id}/roles", response_model=UserResponse)
def update_roles(
    user_id: int,
    body: UpdateRolesRequest,
    db: Annotated[Session, Depends(get_db)],
) -> UserResponse:
    return UserResponse.from_user(UserService(db).update_roles(user_id, body.role_ids))


@router.delete("/{user_id}", response_model=DeleteResponse)
def delete_user(user_id: int, db: Annotated[Session, Depends(get_db)]) -> DeleteResponse:
    """Returns success=False (still 200) when the record survived the delete."""
    result = UserService(db).delete_user(user_id)
    return DeleteResponse(**result.as_dict())
