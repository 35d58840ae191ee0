"""
portal_gateway.api.errors

Structured error responses for the API layer.

Responsibilities:
- Carry a status code plus `{error, detail}` payload out of dependencies/routes.
- Render it, and FastAPI's request-validation failures, in that one shape.
"""

from __future__ import annotations

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse


class ApiError(Exception):
    def __init__(self, status_code: int, error: str, detail: str | None = None) -> None:
        super().__init__(f"{status_code} {error}")
        self.status_code = status_code
        self.error = error
        self.detail = detail


async def _api_error_handler(_: Request, exc: ApiError) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.error, "detail": exc.detail},
    )


async def _validation_error_handler(_: Request, exc: RequestValidationError) -> JSONResponse:
    # "body.competition.0.symbol: Field required; ..."
    problems = [
        f"{'.'.join(str(part) for part in err.get('loc', ()))}: {err.get('msg', 'invalid')}"
        for err in exc.errors()
    ]
    return JSONResponse(
        status_code=422,
        content={"error": "invalid_request", "detail": "; ".join(problems)},
    )


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ApiError, _api_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(RequestValidationError, _validation_error_handler)  # type: ignore[arg-type]


# --- Module Notes -----------------------------------------------------------
# Routers raise `ApiError` rather than `HTTPException` so every rejection,
# including auth, shares the `{error, detail}` body the web client parses.
