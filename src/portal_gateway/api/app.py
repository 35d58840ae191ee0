"""
portal_gateway.api.app

FastAPI app factory for the portal gateway.

Responsibilities:
- Build the FastAPI application and register routers/middleware/error handlers.
- Construct the immutable auth and sandbox components from `Settings` once.
- Provide a single composition root where cross-cutting concerns live.
"""

from __future__ import annotations

from fastapi import FastAPI

from portal_gateway import __version__
from portal_gateway.api.errors import register_error_handlers
from portal_gateway.api.routers.dev_auth import router as dev_auth_router
from portal_gateway.api.routers.health import router as health_router
from portal_gateway.api.routers.signals import router as signals_router
from portal_gateway.api.routers.web import router as web_router
from portal_gateway.api.routers.workspace import router as workspace_router
from portal_gateway.auth.gate import AccessGate
from portal_gateway.auth.initdata import InitDataConfig
from portal_gateway.observability.logging import configure_logging, get_logger
from portal_gateway.observability.middleware import RequestContextMiddleware
from portal_gateway.sandbox import PathConfiner
from portal_gateway.services.signals import SignalsStore
from portal_gateway.services.workspace import WorkspaceService
from portal_gateway.settings import Settings

log = get_logger(__name__)


def create_app(*, settings: Settings) -> FastAPI:
    configure_logging(service_name=settings.service_name, level=settings.log_level)

    app = FastAPI(
        title="Workspace Portal Gateway",
        version=__version__,
        docs_url=None if settings.env == "prod" else "/docs",
        openapi_url=None if settings.env == "prod" else "/openapi.json",
    )

    initdata_cfg = InitDataConfig(
        secret=settings.bot_token,
        max_age_sec=settings.tg_initdata_max_age_sec,
        allow_unsigned=settings.allow_unsigned_initdata,
    )
    if not settings.bot_token:
        if settings.allow_unsigned_initdata:
            log.warning("initdata_signature_checks_disabled")
        else:
            log.warning("bot_token_missing", effect="all protected requests rejected")

    app.state.settings = settings
    app.state.gate = AccessGate(cfg=initdata_cfg, allowed_user_id=settings.allowed_tg_user_id)
    app.state.workspace = WorkspaceService(
        confiner=PathConfiner(settings.workspace_root),
        max_view_bytes=settings.view_max_bytes,
    )
    app.state.signals = SignalsStore(settings.signals_path)
    app.state.static = PathConfiner(settings.static_dir) if settings.static_dir else None

    app.add_middleware(RequestContextMiddleware)
    register_error_handlers(app)
    app.include_router(health_router, tags=["health"])
    app.include_router(dev_auth_router)
    app.include_router(signals_router)
    app.include_router(workspace_router)
    # Catch-all; must stay last.
    app.include_router(web_router)

    log.info(
        "app_created",
        env=settings.env,
        workspace_root=str(app.state.workspace.root),
        allowed_user_id=settings.allowed_tg_user_id,
    )
    return app


# --- Module Notes -----------------------------------------------------------
# Business logic stays in services/auth/sandbox; this module only wires them.
