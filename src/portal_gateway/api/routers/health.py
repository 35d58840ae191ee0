"""
portal_gateway.api.routers.health

Health and readiness endpoints.

Responsibilities:
- Provide liveness probe (`/healthz`).
- Provide readiness probe (`/readyz`) that checks the workspace root is mounted.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends
from starlette.status import HTTP_503_SERVICE_UNAVAILABLE

from portal_gateway.api.deps import workspace_service
from portal_gateway.api.errors import ApiError
from portal_gateway.services.workspace import WorkspaceService

router = APIRouter()


@router.get("/healthz")
async def healthz() -> dict[str, str]:
    return {"status": "ok"}


@router.get("/readyz")
def readyz(svc: WorkspaceService = Depends(workspace_service)) -> dict[str, str]:
    if not svc.root.is_dir():
        raise ApiError(HTTP_503_SERVICE_UNAVAILABLE, "not_ready", "workspace root unavailable")
    return {"status": "ready"}


# --- Module Notes -----------------------------------------------------------
# /readyz fails when the workspace volume is not mounted, which is the only
# dependency this service has.
