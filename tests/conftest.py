"""
tests.conftest

Shared fixtures: a temporary workspace sandbox, settings bound to it, and
helpers for minting signed initData.
"""

from __future__ import annotations

import json
import time
from pathlib import Path

import pytest

from portal_gateway.auth.initdata import sign_init_data
from portal_gateway.settings import Settings

BOT_TOKEN = "123456:TEST-bot-token"
ALLOWED_USER_ID = 549227213
UPDATE_TOKEN = "sync-webhook-token"


def make_init_data(
    *,
    user_id: int | None = ALLOWED_USER_ID,
    auth_date: int | None = None,
    secret: str = BOT_TOKEN,
    extra: dict[str, str] | None = None,
) -> str:
    fields: dict[str, str] = {
        "auth_date": str(int(time.time()) if auth_date is None else auth_date),
        "query_id": "AAHdF6IQAAAAAN0XohDhrOrc",
    }
    if user_id is not None:
        fields["user"] = json.dumps({"id": user_id, "first_name": "Little", "username": "little_i"})
    fields.update(extra or {})
    return sign_init_data(secret=secret, fields=fields)


@pytest.fixture
def workspace(tmp_path: Path) -> Path:
    root = tmp_path / "workspace"
    (root / "notes").mkdir(parents=True)
    (root / "notes" / "todo.md").write_text("# todo\n- ship it\n", encoding="utf-8")
    (root / "readme.txt").write_text("hello", encoding="utf-8")
    (root / "portal").mkdir()
    return root


@pytest.fixture
def settings(workspace: Path) -> Settings:
    return Settings(
        env="test",
        bot_token=BOT_TOKEN,
        allowed_tg_user_id=ALLOWED_USER_ID,
        tg_initdata_max_age_sec=86400,
        update_token=UPDATE_TOKEN,
        workspace_root=workspace,
        signals_path=workspace / "portal" / "signals.json",
        view_max_bytes=64,
    )
