"""Role endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlalchemy.orm import Session

from app.core.database import get_db
from app.schemas.roles import RoleCreate, RoleResponse, RoleUpdate
from app.services.roles import RoleService

router = APIRouter()


@router.get("", response_model=list[RoleResponse])
def list_roles(db: Annotated[Session, Depends(get_db)]) -> list[RoleResponse]:
    return [RoleResponse.model_validate(r) for r in RoleService(db).list_roles()]


@router.get("/name/{name}", response_model=RoleResponse)
def get_role_by_name(name: str, db: Annotated[Session, Depends(get_db)]) -> RoleResponse:
    return RoleResponse.model_validate(RoleService(db).find_by_role_name(name))


@router.get("/{role_id}", response_model=RoleResponse)
def get_role(role_id: int, db: Annotated[Session, Depends(get_db)]) -> RoleResponse:
    role = RoleService(db).find_one_role(role_id)
    if role is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Role not found.")
    return RoleResponse.model_validate(role)


@router.post("", response_model=RoleResponse, status_code=status.HTTP_201_CREATED)
def create_role(body: RoleCreate, db: Annotated[Session, Depends(get_db)]) -> RoleResponse:
    role = RoleService(db).create_role(body.name, body.permission_ids)
    return RoleResponse.model_validate(role)


@router.put("/{role_id}", response_model=RoleResponse)
def update_role(
    role_id: int,
    body: RoleUpdate,
    db: Annotated[Session, Depends(get_db)],
) -> RoleResponse:
    return RoleResponse.model_validate(RoleService(db).update_role(role_id, body.permission_ids))


@router.put("/{role_id}/permissions/{permission_id}", response_model=RoleResponse)
def add_permission_to_role(
    role_id: int,
    permission_id: int,
    db: Annotated[Session, Depends(get_db)],
) -> RoleResponse:
    role = RoleService(db).add_permission_to_role(role_id, permission_id)
    return RoleResponse.model_validate(role)


@router.delete("/{role_id}/permissions/{permission_id}", response_model=RoleResponse)
def remove_permission_from_role(
    role_id: int,
    permission_id: int,
    db: Annotated[Session, Depends(get_db)],
) -> RoleResponse:
    role = RoleService(db).remove_permission_from_role(role_id, permission_id)
    return RoleResponse.model_validate(role)


@router.delete("/{role_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_role(role_id: int, db: Annotated[Session, Depends(get_db)]) -> Response:
    RoleService(db).delete_role(role_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
