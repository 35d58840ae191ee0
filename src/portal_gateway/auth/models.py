"""
portal_gateway.auth.models

Auth domain models.

Responsibilities:
- Define the authenticated identity type (`Principal`) injected into endpoints.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True, slots=True)
class Principal:
    """
    The single allow-listed Telegram user, as embedded in verified initData.
    """

    user_id: int
    username: str | None = None
    first_name: str | None = None
    last_name: str | None = None
    language_code: str | None = None
    initdata_age: int = 0
    raw: dict[str, Any] = field(default_factory=dict, repr=False, compare=False)

    @classmethod
    def from_user(cls, user: dict[str, Any], *, user_id: int, age: int) -> Principal:
        return cls(
            user_id=user_id,
            username=user.get("username"),
            first_name=user.get("first_name"),
            last_name=user.get("last_name"),
            language_code=user.get("language_code"),
            initdata_age=age,
            raw=dict(user),
        )


# --- Module Notes -----------------------------------------------------------
# `raw` keeps the full Telegram user object for handlers that need extra fields
# (photo_url, is_premium, ...); it is excluded from repr and equality.
