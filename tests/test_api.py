"""
tests.test_api

End-to-end HTTP behaviour of the protected workspace and signals endpoints.
"""

from __future__ import annotations

import asyncio
import inspect
import json
import os
import stat
from collections.abc import AsyncIterator
from pathlib import Path

import httpx
import pytest
import pytest_asyncio

from conftest import UPDATE_TOKEN, make_init_data
from portal_gateway.api.app import create_app
from portal_gateway.api.routers.health import readyz
from portal_gateway.api.routers.signals import get_signals, put_signals
from portal_gateway.api.routers.web import serve_asset
from portal_gateway.api.routers.workspace import list_directory, view_file
from portal_gateway.settings import Settings


@pytest_asyncio.fixture
async def client(settings: Settings) -> AsyncIterator[httpx.AsyncClient]:
    app = create_app(settings=settings)
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as c:
        yield c


def _auth(**kwargs) -> dict[str, str]:
    return {"x-tg-initdata": make_init_data(**kwargs)}


@pytest.mark.asyncio
async def test_list_root(client: httpx.AsyncClient) -> None:
    r = await client.get("/api/workspace/list", headers=_auth())
    assert r.status_code == 200
    body = r.json()
    assert body["currentPath"] == ""
    assert [e["name"] for e in body["list"]] == ["notes", "portal", "readme.txt"]
    notes = body["list"][0]
    assert notes == {"name": "notes", "isDirectory": True, "path": "notes"}


@pytest.mark.asyncio
async def test_list_subdirectory_via_query_credential(client: httpx.AsyncClient) -> None:
    r = await client.get(
        "/api/workspace/list", params={"path": "notes", "initData": make_init_data()}
    )
    assert r.status_code == 200
    assert r.json() == {
        "currentPath": "notes",
        "list": [{"name": "todo.md", "isDirectory": False, "path": "notes/todo.md"}],
    }


@pytest.mark.asyncio
async def test_view_file(client: httpx.AsyncClient) -> None:
    r = await client.get("/api/workspace/view", params={"path": "notes/todo.md"}, headers=_auth())
    assert r.status_code == 200
    assert r.json() == {"name": "todo.md", "content": "# todo\n- ship it\n"}


@pytest.mark.asyncio
async def test_unauthenticated_requests_are_401(client: httpx.AsyncClient) -> None:
    r = await client.get("/api/workspace/list")
    assert r.status_code == 401
    assert r.json() == {"error": "unauthorized", "detail": "missing_initData"}

    r = await client.get("/api/signals", headers=_auth(secret="forged"))
    assert r.status_code == 401
    assert r.json()["detail"] == "bad_hash"


@pytest.mark.asyncio
async def test_other_user_is_403(client: httpx.AsyncClient) -> None:
    r = await client.get("/api/workspace/list", headers=_auth(user_id=42))
    assert r.status_code == 403
    assert r.json()["error"] == "forbidden"


@pytest.mark.asyncio
async def test_path_checks_happen_after_auth(client: httpx.AsyncClient) -> None:
    r = await client.get("/api/workspace/view", params={"path": "../../etc/passwd"})
    assert r.status_code == 401


@pytest.mark.asyncio
@pytest.mark.parametrize("path", ["../../etc/passwd", "/etc/passwd", "notes/../../x"])
async def test_traversal_is_403(client: httpx.AsyncClient, path: str) -> None:
    for endpoint in ("/api/workspace/view", "/api/workspace/list"):
        r = await client.get(endpoint, params={"path": path}, headers=_auth())
        assert r.status_code == 403
        assert r.json()["error"] == "path_escape"


@pytest.mark.asyncio
async def test_symlink_out_of_workspace_is_403(
    client: httpx.AsyncClient, workspace: Path, tmp_path: Path
) -> None:
    secret = tmp_path / "secret.txt"
    secret.write_text("top secret", encoding="utf-8")
    os.symlink(secret, workspace / "leak.txt")

    r = await client.get("/api/workspace/view", params={"path": "leak.txt"}, headers=_auth())
    assert r.status_code == 403
    assert "top secret" not in r.text


@pytest.mark.asyncio
async def test_view_errors(client: httpx.AsyncClient, workspace: Path) -> None:
    (workspace / "big.log").write_text("x" * 65, encoding="utf-8")

    r = await client.get("/api/workspace/view", params={"path": "notes"}, headers=_auth())
    assert (r.status_code, r.json()["error"]) == (400, "is_directory")

    r = await client.get("/api/workspace/view", params={"path": "big.log"}, headers=_auth())
    assert (r.status_code, r.json()["error"]) == (400, "too_large")

    r = await client.get("/api/workspace/view", params={"path": "nope.txt"}, headers=_auth())
    assert (r.status_code, r.json()["error"]) == (404, "not_found")

    r = await client.get("/api/workspace/list", params={"path": "readme.txt"}, headers=_auth())
    assert (r.status_code, r.json()["error"]) == (400, "not_a_directory")


@pytest.mark.asyncio
async def test_signals_default_when_missing(client: httpx.AsyncClient) -> None:
    r = await client.get("/api/signals", headers=_auth())
    assert r.status_code == 200
    assert r.json() == {"competition": [], "longterm": []}


@pytest.mark.asyncio
async def test_signals_update_then_read(client: httpx.AsyncClient, settings: Settings) -> None:
    doc = {
        "competition": [{"symbol": "TSLA", "action": "hold", "type": "buy"}],
        "longterm": [],
    }
    r = await client.put("/api/signals", json=doc, headers={"x-update-token": UPDATE_TOKEN})
    assert r.status_code == 200
    assert r.json()["updatedAt"]

    stored = json.loads(settings.signals_path.read_text(encoding="utf-8"))
    assert stored["competition"][0]["symbol"] == "TSLA"

    r = await client.get("/api/signals", headers=_auth())
    assert r.json() == stored


@pytest.mark.asyncio
async def test_signals_update_with_wrong_token_leaves_file_unchanged(
    client: httpx.AsyncClient, settings: Settings
) -> None:
    original = '{"competition": [], "longterm": [], "marker": 1}'
    settings.signals_path.write_text(original, encoding="utf-8")

    doc = {"competition": [{"symbol": "EVIL", "action": "x"}], "longterm": []}
    r = await client.put("/api/signals", json=doc, headers={"x-update-token": "wrong"})
    assert r.status_code == 401
    assert r.json() == {"error": "unauthorized", "detail": "bad_update_token"}

    r = await client.put("/api/signals", json=doc)
    assert r.status_code == 401

    # A valid session credential is not an update credential.
    r = await client.put("/api/signals", json=doc, headers=_auth())
    assert r.status_code == 401

    assert settings.signals_path.read_text(encoding="utf-8") == original


@pytest.mark.asyncio
async def test_signals_unreadable_is_structured_500(
    client: httpx.AsyncClient, settings: Settings
) -> None:
    settings.signals_path.write_text("{broken", encoding="utf-8")
    r = await client.get("/api/signals", headers=_auth())
    assert r.status_code == 500
    assert r.json()["error"] == "signals_unreadable"


@pytest.mark.asyncio
async def test_request_id_is_echoed(client: httpx.AsyncClient) -> None:
    r = await client.get("/healthz", headers={"x-request-id": "req-123"})
    assert r.headers["x-request-id"] == "req-123"


@pytest.mark.asyncio
async def test_signals_invalid_utf8_is_structured_500(
    client: httpx.AsyncClient, settings: Settings
) -> None:
    settings.signals_path.write_bytes(b'{"competition": ["\xff"]}')
    r = await client.get("/api/signals", headers=_auth())
    assert r.status_code == 500
    assert r.headers["content-type"].startswith("application/json")
    assert r.json()["error"] == "signals_unreadable"


@pytest.mark.asyncio
async def test_signals_update_invalid_body_is_structured_422(client: httpx.AsyncClient) -> None:
    r = await client.put(
        "/api/signals",
        json={"competition": [{"action": "no symbol"}]},
        headers={"x-update-token": UPDATE_TOKEN},
    )
    assert r.status_code == 422
    body = r.json()
    assert body["error"] == "invalid_request"
    assert "competition.0.symbol" in body["detail"]


@pytest.mark.asyncio
async def test_signals_write_keeps_file_mode(
    client: httpx.AsyncClient, settings: Settings
) -> None:
    doc = {"competition": [], "longterm": []}
    headers = {"x-update-token": UPDATE_TOKEN}

    r = await client.put("/api/signals", json=doc, headers=headers)
    assert r.status_code == 200
    assert stat.S_IMODE(settings.signals_path.stat().st_mode) == 0o644

    settings.signals_path.chmod(0o640)
    r = await client.put("/api/signals", json=doc, headers=headers)
    assert r.status_code == 200
    assert stat.S_IMODE(settings.signals_path.stat().st_mode) == 0o640


@pytest.mark.asyncio
async def test_list_with_undecodable_filename(client: httpx.AsyncClient, workspace: Path) -> None:
    with open(os.fsencode(workspace) + b"/bad\xffname.txt", "wb") as fh:
        fh.write(b"x")

    r = await client.get("/api/workspace/list", headers=_auth())
    assert r.status_code == 200
    names = [e["name"] for e in r.json()["list"]]
    assert "bad\ufffdname.txt" in names


@pytest.mark.asyncio
async def test_view_fifo_is_rejected_without_blocking(
    client: httpx.AsyncClient, workspace: Path
) -> None:
    os.mkfifo(workspace / "pipe")

    r = await asyncio.wait_for(
        client.get("/api/workspace/view", params={"path": "pipe"}, headers=_auth()),
        timeout=5,
    )
    assert (r.status_code, r.json()["error"]) == (400, "not_regular_file")


def test_filesystem_handlers_run_in_threadpool() -> None:
    # Sync handlers are dispatched to FastAPI's threadpool, off the event loop.
    for handler in (list_directory, view_file, get_signals, put_signals, serve_asset, readyz):
        assert not inspect.iscoroutinefunction(handler), handler.__name__
