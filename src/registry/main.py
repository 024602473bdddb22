# src/registry/main.py
from contextlib import asynccontextmanager
import logging
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from src.registry.core.config import Settings, settings
from src.registry.core.db import build_async_engine, build_session_factory, init_db, shutdown
from src.registry.core.errors import AuthError, RegistryError, StoreError
from src.registry.core.initial_data import init_first_admin
from src.registry.core.logging import configure_logging
from src.registry.core.security import CredentialService
from src.registry.core.store import RegistryStore, SQLStore
from src.registry.services.auth import AuthService
from src.registry.services.registry import RegistryService
from src.registry.services.reporting import ReportingService

from src.registry.api.auth import router as auth_router
from src.registry.api.reports import router as reports_router
from src.registry.api.supporters import router as supporters_router

logger = logging.getLogger(__name__)


def _install_services(app: FastAPI, app_settings: Settings, store: RegistryStore) -> None:
    credentials = CredentialService.from_settings(app_settings)
    app.state.settings = app_settings
    app.state.store = store
    app.state.credentials = credentials
    app.state.registry = RegistryService(store, app_settings.AGE_REFERENCE_DATE)
    app.state.reporting = ReportingService(store)
    app.state.auth = AuthService(store, credentials)


def _register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(RegistryError)
    async def registry_error_handler(request: Request, exc: RegistryError):
        if isinstance(exc, StoreError):
            logger.error("Store error on %s %s", request.method, request.url.path)
        headers = {"WWW-Authenticate": "Bearer"} if isinstance(exc, AuthError) else None
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict(), headers=headers)

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        fields = {}
        for error in exc.errors():
            loc = [str(part) for part in error.get("loc", ())]
            key = ".".join(loc[1:]) or (loc[0] if loc else "body")
            fields.setdefault(key, error.get("msg", "Invalid value"))
        return JSONResponse(
            status_code=400,
            content={"error": "Invalid request", "code": "validation_error", "fields": fields},
        )


def create_app(app_settings: Optional[Settings] = None, store: Optional[RegistryStore] = None) -> FastAPI:
    app_settings = app_settings or settings
    configure_logging(app_settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        engine = None
        active_store = store
        try:
            logger.info("Starting %s (%s mode)", app_settings.PROJECT_NAME, app_settings.MODE)
            if active_store is None:
                engine = build_async_engine(app_settings)
                await init_db(engine)
                active_store = SQLStore(build_session_factory(engine))

            _install_services(app, app_settings, active_store)
            await init_first_admin(active_store, app.state.credentials, app_settings)

            yield

        finally:
            if engine is not None:
                await shutdown(engine)
            logger.info("Shutting down %s", app_settings.PROJECT_NAME)

    app = FastAPI(
        title=app_settings.PROJECT_NAME,
        version=app_settings.API_VERSION,
        lifespan=lifespan,
    )

    if app_settings.all_cors_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=app_settings.all_cors_origins,
            allow_methods=["GET", "POST"],
            allow_headers=["Authorization", "Content-Type"],
        )

    _register_exception_handlers(app)

    # Health check route
    @app.get("/health")
    async def health_check():
        return {"status": "ok"}

    app.include_router(auth_router, prefix="/api")
    app.include_router(supporters_router, prefix="/api")
    app.include_router(reports_router, prefix="/api")
    return app


app = create_app()
