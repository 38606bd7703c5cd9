"""
Shared fixtures
===============
- ``unstorage_app``: in-memory server speaking the unstorage HTTP protocol
- ``storage``: StorageClient wired to that server through ASGITransport
- ``make_client``: StorageClient over httpx.MockTransport for wire-level checks
"""

from datetime import datetime, timezone
from email.utils import format_datetime
from typing import Callable, List, Optional

import httpx
import pytest
import pytest_asyncio
from fastapi import FastAPI, Request, Response
from fastapi.responses import JSONResponse

from unstorage_client import StorageClient


BASE_URL = "http://localhost:3000"


def create_unstorage_app() -> FastAPI:
    """Minimal unstorage-protocol server backed by a dict."""
    app = FastAPI()
    app.state.items = {}
    items = app.state.items

    def _in_namespace(key: str, base: str) -> bool:
        return not base or key == base or key.startswith(base + ":")

    @app.api_route("/{key:path}", methods=["HEAD"])
    async def head_item(key: str):
        item = items.get(key)
        if item is None:
            return Response(status_code=404)
        headers = {"Last-Modified": format_datetime(item["mtime"], usegmt=True)}
        if item["ttl"] is not None:
            headers["x-ttl"] = item["ttl"]
        return Response(status_code=200, headers=headers)

    @app.api_route("/{key:path}", methods=["GET"])
    async def get_item(key: str, request: Request):
        if key.endswith(":"):
            base = key[:-1]
            return JSONResponse([k for k in items if _in_namespace(k, base)])
        item = items.get(key)
        if item is None:
            return Response(status_code=404)
        if request.headers.get("accept") == "application/octet-stream":
            return Response(content=item["value"], media_type="application/octet-stream")
        return Response(content=item["value"], media_type=item["content_type"])

    @app.api_route("/{key:path}", methods=["PUT"])
    async def set_item(key: str, request: Request):
        items[key] = {
            "value": await request.body(),
            "content_type": request.headers.get("content-type", "text/plain"),
            "mtime": datetime.now(timezone.utc).replace(microsecond=0),
            "ttl": request.headers.get("x-ttl"),
        }
        return Response(status_code=204)

    @app.api_route("/{key:path}", methods=["DELETE"])
    async def remove_item(key: str):
        if key.endswith(":"):
            base = key[:-1]
            for k in [k for k in items if _in_namespace(k, base)]:
                del items[k]
        else:
            items.pop(key, None)
        return Response(status_code=204)

    return app


@pytest.fixture
def unstorage_app() -> FastAPI:
    return create_unstorage_app()


@pytest_asyncio.fixture
async def storage(unstorage_app):
    client = StorageClient(BASE_URL, transport=httpx.ASGITransport(app=unstorage_app))
    yield client
    await client.close()


@pytest.fixture
def sent_requests() -> List[httpx.Request]:
    """Requests seen by clients built with make_client."""
    return []


@pytest_asyncio.fixture
async def make_client(sent_requests):
    """
    Factory: make_client(handler, base_url=..., headers=..., **client_kwargs).

    ``handler`` receives the httpx.Request and returns an httpx.Response.
    """
    clients = []

    def factory(
        handler: Callable[[httpx.Request], httpx.Response],
        base_url: str = BASE_URL,
        headers: Optional[dict] = None,
        **kwargs,
    ) -> StorageClient:
        def record(request: httpx.Request) -> httpx.Response:
            sent_requests.append(request)
            return handler(request)

        client = StorageClient(base_url, headers, transport=httpx.MockTransport(record), **kwargs)
        clients.append(client)
        return client

    yield factory

    for client in clients:
        await client.close()


def ok(request: httpx.Request) -> httpx.Response:
    return httpx.Response(200, text="")


@pytest.fixture
def ok_handler():
    return ok
