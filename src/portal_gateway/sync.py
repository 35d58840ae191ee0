"""
portal_gateway.sync

One-shot signals sync: `python -m portal_gateway.sync`.

Responsibilities:
- Build the current signals snapshot (sample data until a real feed exists).
- Write it through `SignalsStore` to the configured signals path.
"""

from __future__ import annotations

import sys
from datetime import UTC, datetime

from portal_gateway.observability.logging import configure_logging, get_logger
from portal_gateway.services.signals import Signal, SignalsDocument, SignalsError, SignalsStore
from portal_gateway.settings import Settings, get_settings

log = get_logger(__name__)


def build_snapshot(now: datetime | None = None) -> SignalsDocument:
    # TODO: read competition_log.json / database.sqlite instead of fixed sample rows.
    stamp = (now or datetime.now(tz=UTC)).isoformat()
    return SignalsDocument(
        updatedAt=stamp,
        competition=[
            Signal(symbol="2330.TW", action="加碼中", type="buy"),
            Signal(symbol="TSLA", action="持倉", type="buy"),
            Signal(symbol="GOLD", action="觀望", type="wait"),
        ],
        longterm=[
            Signal(symbol="Spirit Fox V5", action="運行中", type="buy"),
            Signal(symbol="Risk Level", action="Normal", type="wait"),
        ],
    )


def sync(settings: Settings) -> int:
    store = SignalsStore(settings.signals_path)
    log.info("signals_sync_started", path=str(store.path))
    try:
        store.write(build_snapshot())
    except SignalsError as e:
        log.error("signals_sync_failed", detail=str(e))
        return 1
    log.info("signals_sync_finished", path=str(store.path))
    return 0


def main() -> None:
    settings = get_settings()
    configure_logging(service_name=f"{settings.service_name}-sync", level=settings.log_level)
    sys.exit(sync(settings))


if __name__ == "__main__":
    main()


# --- Module Notes -----------------------------------------------------------
# Scheduled externally (cron/systemd timer); the running gateway picks up the
# new document on the next `GET /api/signals` without a restart.
