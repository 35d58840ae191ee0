from __future__ import annotations

import json
import time

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field
from starlette.status import HTTP_404_NOT_FOUND

from portal_gateway.api.deps import settings_dep
from portal_gateway.api.errors import ApiError
from portal_gateway.auth.initdata import sign_init_data
from portal_gateway.settings import Settings

router = APIRouter(prefix="/v1/dev", tags=["dev"])


class DevInitDataRequest(BaseModel):
    user_id: int
    username: str | None = Field(default=None, max_length=64)
    first_name: str = Field(default="Dev", max_length=64)
    age_seconds: int = Field(default=0, ge=0, le=7 * 24 * 60 * 60)


class DevInitDataResponse(BaseModel):
    init_data: str
    header: str = "x-tg-initdata"


@router.post("/initdata", response_model=DevInitDataResponse)
async def mint_dev_init_data(
    body: DevInitDataRequest,
    settings: Settings = Depends(settings_dep),
) -> DevInitDataResponse:
    if settings.env == "prod" or not settings.bot_token:
        # Hidden in prod; without a bot token there is nothing to sign with.
        raise ApiError(HTTP_404_NOT_FOUND, "not_found", "Not Found")

    user = {"id": body.user_id, "first_name": body.first_name}
    if body.username:
        user["username"] = body.username
    init_data = sign_init_data(
        secret=settings.bot_token,
        fields={
            "auth_date": str(int(time.time()) - body.age_seconds),
            "user": json.dumps(user, separators=(",", ":")),
        },
    )
    return DevInitDataResponse(init_data=init_data)
