"""
portal_gateway.services.signals

JSON-file backed signals document.

Responsibilities:
- Read the signals document (empty default when the file does not exist).
- Replace it atomically on update (last writer wins, no locking).
"""

from __future__ import annotations

import json
import os
import stat
import tempfile
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from portal_gateway.observability.logging import get_logger

log = get_logger(__name__)

DEFAULT_FILE_MODE = 0o644


class Signal(BaseModel):
    model_config = ConfigDict(extra="allow")

    symbol: str = Field(min_length=1, max_length=128)
    action: str = Field(max_length=256)
    type: str = "wait"


class SignalsDocument(BaseModel):
    model_config = ConfigDict(extra="allow")

    updatedAt: str | None = None
    competition: list[Signal] = Field(default_factory=list)
    longterm: list[Signal] = Field(default_factory=list)


class SignalsError(Exception):
    pass


def empty_document() -> dict[str, Any]:
    return {"competition": [], "longterm": []}


class SignalsStore:
    def __init__(self, path: Path) -> None:
        self._path = path

    @property
    def path(self) -> Path:
        return self._path

    def read(self) -> dict[str, Any]:
        try:
            raw = self._path.read_bytes()
        except FileNotFoundError:
            return empty_document()
        except OSError as e:
            raise SignalsError(e.strerror or str(e)) from e
        try:
            # Bytes in: undecodable UTF-8 surfaces as a ValueError here too.
            return json.loads(raw)
        except ValueError as e:
            raise SignalsError(f"Invalid signals JSON: {e}") from e

    def _file_mode(self) -> int:
        try:
            return stat.S_IMODE(self._path.stat().st_mode)
        except FileNotFoundError:
            return DEFAULT_FILE_MODE
        except OSError as e:
            raise SignalsError(e.strerror or str(e)) from e

    def write(self, doc: SignalsDocument) -> dict[str, Any]:
        if doc.updatedAt is None:
            doc = doc.model_copy(update={"updatedAt": datetime.now(tz=UTC).isoformat()})
        payload = doc.model_dump(mode="json")

        mode = self._file_mode()
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            # Write-then-rename so concurrent readers never see a partial document.
            fd, tmp = tempfile.mkstemp(prefix=".signals-", suffix=".tmp", dir=self._path.parent)
        except OSError as e:
            raise SignalsError(e.strerror or str(e)) from e
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                # mkstemp creates 0600; keep the mode the document had before.
                os.fchmod(fh.fileno(), mode)
                json.dump(payload, fh, indent=2, ensure_ascii=False)
            os.replace(tmp, self._path)
        except OSError as e:
            Path(tmp).unlink(missing_ok=True)
            raise SignalsError(e.strerror or str(e)) from e

        log.info(
            "signals_written",
            path=str(self._path),
            competition=len(doc.competition),
            longterm=len(doc.longterm),
        )
        return payload


# --- Module Notes -----------------------------------------------------------
# Writers: the `PUT /api/signals` webhook and `portal_gateway.sync`. Readers only
# ever see a complete document because updates land via `os.replace`.
