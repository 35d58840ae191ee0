"""
portal_gateway.api.deps

FastAPI dependency wiring for the API layer.

Responsibilities:
- Encapsulate app.state access patterns (settings, services).
"""

from __future__ import annotations

from fastapi import Request

from portal_gateway.services.signals import SignalsStore
from portal_gateway.services.workspace import WorkspaceService
from portal_gateway.settings import Settings


def settings_dep(request: Request) -> Settings:
    # The settings instance passed to `create_app`, not the env-cached one.
    return request.app.state.settings  # type: ignore[attr-defined]


def workspace_service(request: Request) -> WorkspaceService:
    return request.app.state.workspace  # type: ignore[attr-defined]


def signals_store(request: Request) -> SignalsStore:
    return request.app.state.signals  # type: ignore[attr-defined]


# --- Module Notes -----------------------------------------------------------
# Components live on app.state rather than module globals so tests can build
# several apps with different settings in one process.
