"""Permission catalog endpoints. Permissions are immutable: no update or delete."""

from typing import Annotated

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from app.core.database import get_db
from app.schemas.permissions import PermissionCreate, PermissionResponse
from app.services.permissions import PermissionService

router = APIRouter()


@router.get("", response_model=list[PermissionResponse])
def list_permissions(db: Annotated[Session, Depends(get_db)]) -> list[PermissionResponse]:
    return [PermissionResponse.model_validate(p) for p in PermissionService(db).list_permissions()]


@router.get("/{permission_id}", response_model=PermissionResponse)
def get_permission(permission_id: int, db: Annotated[Session, Depends(get_db)]) -> PermissionResponse:
    return PermissionResponse.model_validate(PermissionService(db).find_one_permission(permission_id))


@router.post("", response_model=PermissionResponse, status_code=status.HTTP_201_CREATED)
def create_permission(
    body: PermissionCreate,
    db: Annotated[Session, Depends(get_db)],
) -> PermissionResponse:
    """Admin create: an existing name returns 409 rather than the existing row."""
    return PermissionResponse.model_validate(PermissionService(db).create_permission(body.name))
