"""
portal_gateway.api.routers.web

Static web client (the Telegram mini-app bundle).

Responsibilities:
- Serve files from the configured static directory through a `PathConfiner`.
- Fall back to `index.html` for client-side routes.
"""

from __future__ import annotations

from fastapi import APIRouter, Request
from fastapi.responses import FileResponse
from starlette.status import HTTP_404_NOT_FOUND

from portal_gateway.api.errors import ApiError
from portal_gateway.sandbox import PathConfiner, PathEscapeError

INDEX_FILE = "index.html"

router = APIRouter(tags=["web"])


def _static_from_app(request: Request) -> PathConfiner | None:
    return getattr(request.app.state, "static", None)


@router.get("/{asset_path:path}", include_in_schema=False)
def serve_asset(asset_path: str, request: Request) -> FileResponse:
    static = _static_from_app(request)
    if static is None:
        raise ApiError(HTTP_404_NOT_FOUND, "not_found", "Not Found")

    try:
        target = static.resolve(asset_path)
    except PathEscapeError as e:
        raise ApiError(HTTP_404_NOT_FOUND, "not_found", "Not Found") from e
    if target.path.is_file():
        return FileResponse(target.path)

    index = static.root / INDEX_FILE
    if not index.is_file():
        raise ApiError(HTTP_404_NOT_FOUND, "not_found", "Not Found")
    return FileResponse(index)


# --- Module Notes -----------------------------------------------------------
# Registered last in `create_app`: the catch-all path would otherwise shadow the
# API routes.
