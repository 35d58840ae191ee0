"""
portal_gateway.auth.deps

FastAPI dependency functions for authentication and authorization.

Responsibilities:
- Convert transported initData into a typed `Principal` via the app's `AccessGate`.
- Attach the principal to the request and the logging context.
"""

from __future__ import annotations

import structlog
from fastapi import Depends, Request

from portal_gateway.api.errors import ApiError
from portal_gateway.auth.gate import AccessDenied, AccessGate, extract_init_data
from portal_gateway.auth.models import Principal


def gate_from_app(request: Request) -> AccessGate:
    # Built once in `portal_gateway.api.app.create_app`.
    return request.app.state.gate  # type: ignore[attr-defined]


async def require_portal_user(
    request: Request,
    gate: AccessGate = Depends(gate_from_app),
) -> Principal:
    init_data = extract_init_data(request.headers, request.query_params)
    try:
        principal = gate.authorize(init_data)
    except AccessDenied as e:
        raise ApiError(e.status_code, e.error, e.detail) from e

    request.state.principal = principal
    structlog.contextvars.bind_contextvars(user_id=principal.user_id)
    return principal


# --- Module Notes -----------------------------------------------------------
# Routers attach `require_portal_user` as a router- or route-level dependency;
# handlers that need the identity read `request.state.principal`.
