"""
portal_gateway.auth.gate

Access gate: initData authentication plus single-user authorization.

Responsibilities:
- Run the session verifier over the transported credential.
- Map verifier rejections to 401 and allow-list mismatches to 403.
"""

from __future__ import annotations

from typing import Any

from starlette.status import HTTP_401_UNAUTHORIZED, HTTP_403_FORBIDDEN

from portal_gateway.auth.initdata import InitDataConfig, InitDataError, verify_init_data
from portal_gateway.auth.models import Principal
from portal_gateway.observability.logging import get_logger

log = get_logger(__name__)

INITDATA_HEADER = "x-tg-initdata"
INITDATA_QUERY_PARAM = "initData"


class AccessDenied(Exception):
    def __init__(self, status_code: int, error: str, detail: str) -> None:
        super().__init__(f"{error}: {detail}")
        self.status_code = status_code
        self.error = error
        self.detail = detail


def _numeric_id(user: dict[str, Any]) -> int | None:
    raw = user.get("id")
    # bool is an int subclass; `true` is not a user id.
    if isinstance(raw, bool):
        return None
    if isinstance(raw, int):
        return raw
    # ASCII only: str.isdigit() also accepts "²", which int() rejects.
    if isinstance(raw, str) and raw.isascii() and raw.strip().isdigit():
        return int(raw)
    return None


class AccessGate:
    def __init__(self, *, cfg: InitDataConfig, allowed_user_id: int) -> None:
        self._cfg = cfg
        self._allowed_user_id = allowed_user_id

    def authorize(self, init_data: str | None, *, now: int | None = None) -> Principal:
        try:
            verified = verify_init_data(cfg=self._cfg, init_data=init_data, now=now)
        except InitDataError as e:
            log.warning("initdata_rejected", reason=e.reason.value, age=e.age)
            raise AccessDenied(HTTP_401_UNAUTHORIZED, "unauthorized", e.reason.value) from e

        # No embedded user means no identity to match against the allow-list.
        if verified.user is None:
            log.warning("access_forbidden", reason="missing_user")
            raise AccessDenied(HTTP_403_FORBIDDEN, "forbidden", "missing_user")

        user_id = _numeric_id(verified.user)
        if user_id is None or user_id != self._allowed_user_id:
            log.warning("access_forbidden", reason="user_not_allowed", user_id=user_id)
            raise AccessDenied(HTTP_403_FORBIDDEN, "forbidden", "user_not_allowed")

        return Principal.from_user(verified.user, user_id=user_id, age=verified.age)


def extract_init_data(headers: Any, query_params: Any) -> str | None:
    # Header wins; an empty header is treated as absent.
    return headers.get(INITDATA_HEADER) or query_params.get(INITDATA_QUERY_PARAM)


# --- Module Notes -----------------------------------------------------------
# Framework-agnostic: `auth.deps` adapts it to FastAPI, and
# tests drive it directly without an ASGI app.
