"""Register/authenticate endpoints and the request-scoped auth dependencies."""

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Request, status
from sqlalchemy.orm import Session

from app.core.config import Settings
from app.core.database import get_db
from app.schemas.auth import AuthenticationRequest, AuthenticationResponse, RegisterRequest
from app.schemas.users import UserResponse
from app.services.authorization import Principal
from app.services.tokens import TokenService
from app.services.users import UserService

router = APIRouter()


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_token_service(request: Request) -> TokenService:
    return request.app.state.token_service


def get_current_principal(request: Request) -> Principal:
    """Dependency: the principal the authorization gate attached to this request. 401 if none."""
    principal = getattr(request.state, "principal", None)
    if principal is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return principal


def _token_response(tokens: TokenService, user) -> AuthenticationResponse:
    issued = tokens.issue(user)
    return AuthenticationResponse(
        access_token=issued.access_token,
        token_type=issued.token_type,
        expires_at=issued.expires_at,
        user=UserResponse.from_user(user),
    )


@router.post("/register/{role_id}", response_model=AuthenticationResponse)
def register(
    role_id: int,
    body: RegisterRequest,
    db: Annotated[Session, Depends(get_db)],
    tokens: Annotated[TokenService, Depends(get_token_service)],
    settings: Annotated[Settings, Depends(get_app_settings)],
) -> AuthenticationResponse:
    """
    Create an account whose primary role is role_id and return a token for it.
    Only roles listed in SELF_REGISTRATION_ROLES can be claimed here.
    """
    user = UserService(db).register(
        body, role_id, allowed_role_names=settings.SELF_REGISTRATION_ROLES
    )
    return _token_response(tokens, user)


@router.post("/authenticate", response_model=AuthenticationResponse)
def authenticate(
    body: AuthenticationRequest,
    db: Annotated[Session, Depends(get_db)],
    tokens: Annotated[TokenService, Depends(get_token_service)],
) -> AuthenticationResponse:
    """
    Authenticate with email and password; returns a JWT access token.
    Include the token in the Authorization header as: Bearer <access_token>
    The token is not revoked on logout; it stays valid until expires_at.
    """
    user = UserService(db).authenticate(body.email, body.password)
    return _token_response(tokens, user)
