"""FastAPI application entrypoint. No business logic; only wiring and middleware."""

from dotenv import load_dotenv

load_dotenv()

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.orm import Session, sessionmaker
from starlette.requests import Request
from starlette.responses import JSONResponse

from app.api.v1 import router as v1_router
from app.core.config import Settings, get_settings
from app.core.database import SessionLocal
from app.core.errors import AccessControlError
from app.gate import AuthorizationGate, PrincipalCache, default_access_rules
from app.services.bootstrap import run_bootstrap
from app.services.catalog import load_catalog
from app.services.tokens import Clock, TokenService, utc_now

logger = logging.getLogger(__name__)


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%SZ",
    )


def create_app(
    settings: Settings | None = None,
    session_factory: sessionmaker[Session] | None = None,
    clock: Clock = utc_now,
) -> FastAPI:
    """
    Build the application with its collaborators wired explicitly.

    Middleware runs outermost-first in reverse order of registration, so CORS
    sees requests before the authorization gate does.
    """
    settings = settings or get_settings()
    session_factory = session_factory or SessionLocal
    configure_logging(settings.LOG_LEVEL)

    catalog = load_catalog(settings.RBAC_CATALOG_PATH)
    token_service = TokenService.from_settings(settings, clock=clock)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if settings.SEED_ON_STARTUP:
            with session_factory() as session:
                run_bootstrap(session, catalog, settings)
        yield

    app = FastAPI(
        title="EDMS Access Control API",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.session_factory = session_factory
    app.state.token_service = token_service
    app.state.catalog = catalog

    app.add_middleware(
        AuthorizationGate,
        token_service=token_service,
        session_factory=session_factory,
        rules=default_access_rules(settings.API_V1_PREFIX),
        cache=PrincipalCache(
            ttl_seconds=settings.SUBJECT_CACHE_TTL_SEC,
            maxsize=settings.SUBJECT_CACHE_MAX_ENTRIES,
        ),
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"] if settings.APP_ENV == "dev" else [],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(AccessControlError)
    async def access_control_error_handler(_request: Request, exc: AccessControlError) -> JSONResponse:
        if exc.status_code == 403:
            # Generic signal only; the missing permission is not disclosed.
            logger.info("Access denied: %s", exc.message)
            return JSONResponse(status_code=403, content={"detail": "Forbidden"})
        headers = {"WWW-Authenticate": "Bearer"} if exc.status_code == 401 else None
        return JSONResponse(status_code=exc.status_code, content={"detail": exc.message}, headers=headers)

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(_request: Request, exc: RequestValidationError) -> JSONResponse:
        errors = dict()
        for error in exc.errors():
            if "loc" not in error or "msg" not in error:
                continue
            key = error["loc"][-1]
            errors[key] = error["msg"]
        logger.info("Request validation error %s", errors)
        return JSONResponse(status_code=400, content=jsonable_encoder({"detail": errors}))

    app.include_router(v1_router, prefix=settings.API_V1_PREFIX)

    @app.get("/")
    def root() -> dict[str, str]:
        """Root route; minimal payload for discovery."""
        return {"message": "EDMS Access Control API"}

    return app


app = create_app()
