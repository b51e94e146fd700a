"""
Authorization gate: an explicit, ordered list of stages run before any route handler.

Order is fixed: audit -> allow-list -> authenticate -> authorize. Each stage
returns None to continue or a Response to reject; a rejected request never
reaches business logic. Rejections carry a generic body only; the reason
(which check failed, which permission was missing) goes to the log.
"""

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum

from fastapi.security.utils import get_authorization_scheme_param
from sqlalchemy.orm import Session, sessionmaker
from starlette.concurrency import run_in_threadpool
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import JSONResponse, Response
from starlette.types import ASGIApp

from app.core.errors import TokenError
from app.gate.cache import PrincipalCache
from app.gate.rules import AccessRules
from app.services.authorization import Principal, resolve_principal
from app.services.tokens import TokenService

logger = logging.getLogger(__name__)


class RequestState(str, Enum):
    UNAUTHENTICATED = "unauthenticated"
    PUBLIC = "public"
    AUTHENTICATED = "authenticated"
    AUTHORIZED = "authorized"
    REJECTED = "rejected"


class Rejection(str, Enum):
    UNAUTHENTICATED = "unauthenticated"
    FORBIDDEN = "forbidden"


@dataclass
class GateContext:
    method: str
    path: str
    client: str | None = None
    state: RequestState = RequestState.UNAUTHENTICATED
    principal: Principal | None = None
    rejection: Rejection | None = None
    reason: str | None = None


Stage = Callable[[Request, GateContext], Response | None]


def bearer_token(authorization: str | None) -> str | None:
    """Extract the token from an 'Authorization: Bearer <token>' header value."""
    scheme, token = get_authorization_scheme_param(authorization)
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


def unauthenticated_response() -> JSONResponse:
    return JSONResponse(
        status_code=401,
        content={"detail": "Not authenticated"},
        headers={"WWW-Authenticate": "Bearer"},
    )


def forbidden_response() -> JSONResponse:
    return JSONResponse(status_code=403, content={"detail": "Forbidden"})


class AuthorizationGate(BaseHTTPMiddleware):
    def __init__(
        self,
        app: ASGIApp,
        token_service: TokenService,
        session_factory: sessionmaker[Session],
        rules: AccessRules,
        cache: PrincipalCache | None = None,
    ) -> None:
        super().__init__(app)
        self.token_service = token_service
        self.session_factory = session_factory
        self.rules = rules
        self.cache = cache or PrincipalCache()
        self.stages: list[Stage] = [
            self.audit,
            self.allow_list,
            self.authenticate,
            self.authorize,
        ]

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        ctx = GateContext(
            method=request.method.upper(),
            path=request.url.path,
            client=request.client.host if request.client else None,
        )
        started = time.perf_counter()
        # Stages may hit the database with a sync session; keep them off the event loop.
        rejected = await run_in_threadpool(self.run_stages, request, ctx)
        if rejected is not None:
            response = rejected
        else:
            request.state.principal = ctx.principal
            response = await call_next(request)
        logger.info(
            "Request completed",
            extra={
                "method": ctx.method,
                "path": ctx.path,
                "gate_state": ctx.state.value,
                "user_id": ctx.principal.user_id if ctx.principal else None,
                "status_code": response.status_code,
                "duration_ms": round((time.perf_counter() - started) * 1000, 2),
            },
        )
        return response

    def run_stages(self, request: Request, ctx: GateContext) -> Response | None:
        for stage in self.stages:
            response = stage(request, ctx)
            if response is not None:
                return response
        return None

    def reject(self, ctx: GateContext, kind: Rejection, reason: str) -> Response:
        ctx.state = RequestState.REJECTED
        ctx.rejection = kind
        ctx.reason = reason
        logger.warning(
            "Request rejected",
            extra={
                "method": ctx.method,
                "path": ctx.path,
                "client": ctx.client,
                "rejection": kind.value,
                "reason": reason,
            },
        )
        if kind is Rejection.FORBIDDEN:
            return forbidden_response()
        return unauthenticated_response()

    def audit(self, request: Request, ctx: GateContext) -> Response | None:
        """Runs first so every attempt, including rejected ones, is logged."""
        logger.info(
            "Request received",
            extra={
                "method": ctx.method,
                "path": ctx.path,
                "client": ctx.client,
                "user_agent": request.headers.get("user-agent"),
            },
        )
        return None

    def allow_list(self, request: Request, ctx: GateContext) -> Response | None:
        if self.rules.is_public(ctx.path):
            ctx.state = RequestState.PUBLIC
        return None

    def authenticate(self, request: Request, ctx: GateContext) -> Response | None:
        if ctx.state is RequestState.PUBLIC:
            return None
        token = bearer_token(request.headers.get("authorization"))
        if token is None:
            return self.reject(ctx, Rejection.UNAUTHENTICATED, "missing bearer token")
        try:
            subject = self.token_service.validate(token)
        except TokenError as e:
            return self.reject(ctx, Rejection.UNAUTHENTICATED, f"{type(e).__name__}: {e.message}")

        principal = self.cache.get(subject.user_id)
        if principal is None:
            with self.session_factory() as session:
                principal = resolve_principal(session, subject.user_id)
            if principal is None:
                return self.reject(ctx, Rejection.UNAUTHENTICATED, "token subject does not exist")
            self.cache.put(principal)
        if principal.email != subject.email:
            return self.reject(ctx, Rejection.UNAUTHENTICATED, "token subject does not match user")

        ctx.principal = principal
        ctx.state = RequestState.AUTHENTICATED
        return None

    def authorize(self, request: Request, ctx: GateContext) -> Response | None:
        if ctx.state is RequestState.PUBLIC:
            return None
        if ctx.principal is None:
            return self.reject(ctx, Rejection.UNAUTHENTICATED, "authorize reached without identity")
        required = self.rules.required_for(ctx.method, ctx.path)
        if required and not ctx.principal.has_any(required):
            return self.reject(
                ctx,
                Rejection.FORBIDDEN,
                f"missing any of {sorted(required)}",
            )
        ctx.state = RequestState.AUTHORIZED
        return None
