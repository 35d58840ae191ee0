"""
portal_gateway.api.routers.signals

Signals document endpoints.

Responsibilities:
- Serve the signals document to the allow-listed Telegram user.
- Accept replacements from the sync webhook, authorized by a shared token.
"""

from __future__ import annotations

import hmac
from typing import Any

from fastapi import APIRouter, Depends, Header
from starlette.status import HTTP_401_UNAUTHORIZED, HTTP_500_INTERNAL_SERVER_ERROR

from portal_gateway.api.deps import settings_dep, signals_store
from portal_gateway.api.errors import ApiError
from portal_gateway.auth.deps import require_portal_user
from portal_gateway.observability.logging import get_logger
from portal_gateway.services.signals import SignalsDocument, SignalsError, SignalsStore
from portal_gateway.settings import Settings

log = get_logger(__name__)

router = APIRouter(prefix="/api/signals", tags=["signals"])


def require_update_token(
    x_update_token: str | None = Header(default=None),
    settings: Settings = Depends(settings_dep),
) -> None:
    # Distinct trust boundary from initData: a static token held by the webhook caller.
    if not settings.update_token:
        raise ApiError(HTTP_401_UNAUTHORIZED, "unauthorized", "update_token_not_configured")
    if not x_update_token:
        raise ApiError(HTTP_401_UNAUTHORIZED, "unauthorized", "missing_update_token")
    if not hmac.compare_digest(
        x_update_token.encode("utf-8"), settings.update_token.encode("utf-8")
    ):
        log.warning("signals_update_rejected", reason="bad_update_token")
        raise ApiError(HTTP_401_UNAUTHORIZED, "unauthorized", "bad_update_token")


# File I/O below: sync handlers, executed in the threadpool.
@router.get("", dependencies=[Depends(require_portal_user)])
def get_signals(store: SignalsStore = Depends(signals_store)) -> dict[str, Any]:
    try:
        return store.read()
    except SignalsError as e:
        log.error("signals_read_failed", detail=str(e))
        raise ApiError(HTTP_500_INTERNAL_SERVER_ERROR, "signals_unreadable", str(e)) from e


@router.put("", dependencies=[Depends(require_update_token)])
def put_signals(
    body: SignalsDocument,
    store: SignalsStore = Depends(signals_store),
) -> dict[str, Any]:
    try:
        return store.write(body)
    except SignalsError as e:
        log.error("signals_write_failed", detail=str(e))
        raise ApiError(HTTP_500_INTERNAL_SERVER_ERROR, "signals_unwritable", str(e)) from e


# --- Module Notes -----------------------------------------------------------
# The webhook token and the initData credential are independent: holding one
# never grants the other endpoint.
