"""
portal_gateway.api.routers.workspace

Sandboxed workspace browsing endpoints.

Responsibilities:
- List a directory and preview a text file under the workspace root.
- Require the allow-listed Telegram user before any path is resolved.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, Field
from starlette.status import (
    HTTP_400_BAD_REQUEST,
    HTTP_403_FORBIDDEN,
    HTTP_404_NOT_FOUND,
    HTTP_500_INTERNAL_SERVER_ERROR,
)

from portal_gateway.api.deps import workspace_service
from portal_gateway.api.errors import ApiError
from portal_gateway.auth.deps import require_portal_user
from portal_gateway.observability.logging import get_logger
from portal_gateway.services.workspace import WorkspaceError, WorkspaceService

log = get_logger(__name__)

router = APIRouter(
    prefix="/api/workspace",
    tags=["workspace"],
    dependencies=[Depends(require_portal_user)],
)

_STATUS_BY_CODE = {
    "path_escape": HTTP_403_FORBIDDEN,
    "not_found": HTTP_404_NOT_FOUND,
    "is_directory": HTTP_400_BAD_REQUEST,
    "not_a_directory": HTTP_400_BAD_REQUEST,
    "not_regular_file": HTTP_400_BAD_REQUEST,
    "too_large": HTTP_400_BAD_REQUEST,
}


class FileEntryModel(BaseModel):
    name: str
    isDirectory: bool
    path: str


class ListResponse(BaseModel):
    currentPath: str
    # Serialized as "list" to match the web client.
    entries: list[FileEntryModel] = Field(default_factory=list, serialization_alias="list")


class ViewResponse(BaseModel):
    name: str
    content: str


def _to_api_error(e: WorkspaceError) -> ApiError:
    status = _STATUS_BY_CODE.get(e.code, HTTP_500_INTERNAL_SERVER_ERROR)
    if status == HTTP_500_INTERNAL_SERVER_ERROR:
        log.error("workspace_io_failed", code=e.code, detail=e.message)
    else:
        log.warning("workspace_request_rejected", code=e.code)
    return ApiError(status, e.code, e.message)


# Plain `def` handlers: FastAPI runs them in its threadpool, so disk I/O never
# blocks the event loop.
@router.get("/list", response_model=ListResponse)
def list_directory(
    path: str | None = Query(default=None),
    svc: WorkspaceService = Depends(workspace_service),
) -> ListResponse:
    try:
        current, entries = svc.list_dir(path)
    except WorkspaceError as e:
        raise _to_api_error(e) from e
    return ListResponse(
        currentPath=current,
        entries=[FileEntryModel(**entry.to_json()) for entry in entries],
    )


@router.get("/view", response_model=ViewResponse)
def view_file(
    path: str | None = Query(default=None),
    svc: WorkspaceService = Depends(workspace_service),
) -> ViewResponse:
    try:
        preview = svc.view_file(path)
    except WorkspaceError as e:
        raise _to_api_error(e) from e
    return ViewResponse(name=preview.name, content=preview.content)


# --- Module Notes -----------------------------------------------------------
# Status mapping lives here; `services.workspace` only knows error codes.
