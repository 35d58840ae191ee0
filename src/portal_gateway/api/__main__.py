"""
portal_gateway.api.__main__

Entrypoint for running the gateway via `python -m portal_gateway.api`.

Responsibilities:
- Load settings.
- Create the app.
- Start uvicorn with structlog-compatible logging config.
"""

from __future__ import annotations

import uvicorn

from portal_gateway.api.app import create_app
from portal_gateway.settings import get_settings


def main() -> None:
    settings = get_settings()
    app = create_app(settings=settings)

    uvicorn.run(
        app,
        host=settings.api_host,
        port=settings.api_port,
        log_config=None,  # structlog
        # The access line carries the raw query string, i.e. `?initData=...`.
        # `RequestContextMiddleware` logs path-only completion lines instead.
        access_log=False,
    )


if __name__ == "__main__":
    main()


# --- Module Notes -----------------------------------------------------------
# `portal-gateway` console script (pyproject) points at `main`.
