"""
portal_gateway.auth.initdata

Telegram WebApp `initData` signing and verification.

Responsibilities:
- Rebuild the canonical data-check string and verify its HMAC-SHA256 signature.
- Enforce freshness via `auth_date` and parse the embedded `user` JSON.
- Sign credentials for local/dev scenarios and tests.

Note:
- The signing key is `sha256(bot_token)`, as used for Telegram Login Widget data.
"""

from __future__ import annotations

import enum
import hashlib
import hmac
import json
import time
from dataclasses import dataclass, field
from typing import Any
from urllib.parse import parse_qsl, urlencode

from portal_gateway.observability.logging import get_logger

log = get_logger(__name__)

HASH_FIELD = "hash"
AUTH_DATE_FIELD = "auth_date"
USER_FIELD = "user"


class InitDataFailure(str, enum.Enum):
    MISSING_CREDENTIAL = "missing_initData"
    MISSING_SIGNATURE = "missing_hash"
    MISSING_SECRET = "missing_bot_token"
    BAD_SIGNATURE = "bad_hash"
    MISSING_AUTH_DATE = "missing_auth_date"
    EXPIRED = "initData_expired"
    MALFORMED_USER = "bad_user_json"
    VERIFICATION_FAILED = "verification_failed"


class InitDataError(Exception):
    def __init__(self, reason: InitDataFailure, *, age: int | None = None) -> None:
        super().__init__(reason.value)
        self.reason = reason
        self.age = age


@dataclass(frozen=True, slots=True)
class InitDataConfig:
    secret: str | None = field(repr=False)
    max_age_sec: int
    # Explicit opt-in; without it a missing secret rejects every credential.
    allow_unsigned: bool = False


@dataclass(frozen=True, slots=True)
class VerifiedInitData:
    user: dict[str, Any] | None
    age: int


def _secret_key(secret: str) -> bytes:
    return hashlib.sha256(secret.encode("utf-8")).digest()


def data_check_string(pairs: list[tuple[str, str]]) -> str:
    # Byte-wise key order; sorted() is stable so duplicate keys keep input order.
    ordered = sorted(pairs, key=lambda kv: kv[0].encode("utf-8"))
    return "\n".join(f"{k}={v}" for k, v in ordered)


def compute_hash(secret: str, pairs: list[tuple[str, str]]) -> str:
    return hmac.new(
        _secret_key(secret),
        data_check_string(pairs).encode("utf-8"),
        hashlib.sha256,
    ).hexdigest()


def sign_init_data(*, secret: str, fields: dict[str, str]) -> str:
    """
    Produce a URL-encoded credential string carrying a valid `hash`.
    Any `hash` already present in `fields` is replaced.
    """

    pairs = [(k, v) for k, v in fields.items() if k != HASH_FIELD]
    return urlencode([*pairs, (HASH_FIELD, compute_hash(secret, pairs))])


def verify_init_data(
    *,
    cfg: InitDataConfig,
    init_data: str | None,
    now: int | None = None,
) -> VerifiedInitData:
    try:
        return _verify(cfg=cfg, init_data=init_data, now=now)
    except InitDataError:
        raise
    except Exception as e:
        log.exception("initdata_verification_fault")
        raise InitDataError(InitDataFailure.VERIFICATION_FAILED) from e


def _verify(*, cfg: InitDataConfig, init_data: str | None, now: int | None) -> VerifiedInitData:
    if not init_data or not isinstance(init_data, str):
        raise InitDataError(InitDataFailure.MISSING_CREDENTIAL)
    try:
        pairs = parse_qsl(init_data, keep_blank_values=True, strict_parsing=True)
    except ValueError as e:
        raise InitDataError(InitDataFailure.MISSING_CREDENTIAL) from e

    supplied = next((v for k, v in pairs if k == HASH_FIELD), None)
    if not supplied:
        raise InitDataError(InitDataFailure.MISSING_SIGNATURE)
    pairs = [(k, v) for k, v in pairs if k != HASH_FIELD]

    if cfg.secret:
        expected = compute_hash(cfg.secret, pairs)
        if not hmac.compare_digest(expected.encode("utf-8"), supplied.encode("utf-8")):
            raise InitDataError(InitDataFailure.BAD_SIGNATURE)
    elif cfg.allow_unsigned:
        log.warning("initdata_signature_skipped", reason="allow_unsigned_initdata")
    else:
        raise InitDataError(InitDataFailure.MISSING_SECRET)

    fields: dict[str, str] = {}
    for k, v in pairs:
        fields.setdefault(k, v)

    try:
        auth_date = int(fields.get(AUTH_DATE_FIELD, "0"))
    except ValueError as e:
        raise InitDataError(InitDataFailure.MISSING_AUTH_DATE) from e
    if not auth_date:
        raise InitDataError(InitDataFailure.MISSING_AUTH_DATE)

    current = int(time.time()) if now is None else now
    age = current - auth_date
    if age > cfg.max_age_sec:
        raise InitDataError(InitDataFailure.EXPIRED, age=age)

    user: dict[str, Any] | None = None
    user_json = fields.get(USER_FIELD)
    if user_json:
        try:
            user = json.loads(user_json)
        except ValueError as e:
            raise InitDataError(InitDataFailure.MALFORMED_USER) from e
        if not isinstance(user, dict):
            raise InitDataError(InitDataFailure.MALFORMED_USER)

    return VerifiedInitData(user=user, age=age)


# --- Module Notes -----------------------------------------------------------
# Signing is used by:
# - `api/routers/dev_auth.py` (dev convenience)
# - the test-suite fixtures
