"""Health check endpoint with database connectivity and the loaded RBAC catalog version."""

from typing import Annotated

from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from app.api.v1.auth import get_app_settings
from app.core.config import Settings
from app.core.database import check_db_connected, get_db
from app.schemas.health import HealthResponse

router = APIRouter()


@router.get("", response_model=HealthResponse)
def get_health(
    request: Request,
    db: Annotated[Session, Depends(get_db)],
    settings: Annotated[Settings, Depends(get_app_settings)],
) -> HealthResponse:
    """
    Return service health status and database connectivity.
    Used by load balancers and monitoring; not behind the authorization gate.
    """
    db_status = "connected" if check_db_connected(db) else "disconnected"
    catalog = getattr(request.app.state, "catalog", None)

    return HealthResponse(
        status="ok",
        environment=settings.APP_ENV,
        database=db_status,
        catalog_version=catalog.version if catalog is not None else None,
    )
