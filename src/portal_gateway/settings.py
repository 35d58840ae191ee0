"""
portal_gateway.settings

Central configuration model (Pydantic Settings).

Responsibilities:
- Provide strongly-typed, env-driven settings for every layer.
- Hide secrets (bot token, update token) from repr/logging.
- Offer a cached settings instance for the process entry points.
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_WORKSPACE_ROOT = Path("/home/node/.openclaw/workspace")


class Settings(BaseSettings):
    """
    Immutable after construction: the app factory derives the verifier config,
    access gate and path confiners from one instance and never re-reads env.
    """

    model_config = SettingsConfigDict(env_prefix="PORTAL_", case_sensitive=False, frozen=True)

    env: Literal["dev", "test", "prod"] = "prod"
    service_name: str = "portal-gateway"
    log_level: str = "INFO"

    api_host: str = "0.0.0.0"
    api_port: int = 3000

    # Telegram WebApp initData verification
    bot_token: str | None = Field(default=None, repr=False)
    allowed_tg_user_id: int = 549227213
    tg_initdata_max_age_sec: int = Field(default=24 * 60 * 60, ge=0)
    # Disables signature checks when no bot token is set. Offline/demo use only.
    allow_unsigned_initdata: bool = False

    # Shared token for the signals webhook (separate from initData).
    update_token: str | None = Field(default=None, repr=False)

    # Filesystem
    workspace_root: Path = DEFAULT_WORKSPACE_ROOT
    signals_path: Path = DEFAULT_WORKSPACE_ROOT / "portal" / "signals.json"
    static_dir: Path | None = None
    view_max_bytes: int = Field(default=1024 * 1024, gt=0)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()


# --- Module Notes -----------------------------------------------------------
# Environment variables use the PORTAL_ prefix, e.g. PORTAL_BOT_TOKEN,
# PORTAL_ALLOWED_TG_USER_ID, PORTAL_WORKSPACE_ROOT, PORTAL_UPDATE_TOKEN.
