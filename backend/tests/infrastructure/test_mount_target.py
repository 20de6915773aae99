"""FastAPI Mount Target — HTTP-level tests for fallback and static routes.

Tests cover:
    - Unmatched /v10/a/x is answered by /v2/a/x
    - Matched paths are answered by their own version
    - One hop only: /v3 falls back to /v2, never further to /v1
    - Static folder serves existing files and lets other paths fall through
    - include() rejects non-router handlers
"""

import pytest
from fastapi import APIRouter, FastAPI
from httpx import ASGITransport, AsyncClient

from endurance.infrastructure.mount_target import FastAPIMountTarget

from tests.module_tree import write


def _router(tag, *paths):
    router = APIRouter()
    for path in paths:
        async def endpoint(path=path):
            return {"tag": tag, "path": path}
        router.add_api_route(path, endpoint, methods=["GET"])
    return router


def _client(app):
    return AsyncClient(transport=ASGITransport(app=app), base_url="http://test")


@pytest.mark.asyncio
async def test_fallback_redispatches_to_previous_version():
    app = FastAPI()
    target = FastAPIMountTarget(app)
    target.include("/v2/a", _router("v2", "/x", "/shared"))
    target.include("/v10/a", _router("v10", "/shared"))
    target.add_fallback("/v10/a", "/v2/a")

    async with _client(app) as client:
        fallback = await client.get("/v10/a/x")
        own = await client.get("/v10/a/shared")
        missing = await client.get("/v10/a/nowhere")

    assert fallback.status_code == 200
    assert fallback.json() == {"tag": "v2", "path": "/x"}
    assert own.json() == {"tag": "v10", "path": "/shared"}
    assert missing.status_code == 404


@pytest.mark.asyncio
async def test_fallback_to_default_base_path():
    app = FastAPI()
    target = FastAPIMountTarget(app)
    target.include("/b", _router("default", "/y"))
    target.include("/v3/b", _router("v3", "/z"))
    target.add_fallback("/v3/b", "/b")

    async with _client(app) as client:
        response = await client.get("/v3/b/y")

    assert response.json() == {"tag": "default", "path": "/y"}


@pytest.mark.asyncio
async def test_fallback_is_a_single_hop():
    app = FastAPI()
    target = FastAPIMountTarget(app)
    target.include("/v1/c", _router("v1", "/old"))
    target.include("/v2/c", _router("v2", "/mid"))
    target.add_fallback("/v2/c", "/v1/c")
    target.include("/v3/c", _router("v3", "/new"))
    target.add_fallback("/v3/c", "/v2/c")

    async with _client(app) as client:
        one_hop = await client.get("/v3/c/mid")
        two_hops = await client.get("/v3/c/old")

    assert one_hop.json() == {"tag": "v2", "path": "/mid"}
    assert two_hops.status_code == 404


@pytest.mark.asyncio
async def test_fallback_does_not_capture_sibling_prefixes():
    app = FastAPI()
    target = FastAPIMountTarget(app)
    target.include("/v1/a", _router("v1", "/x"))
    target.include("/v2/a", _router("v2", "/y"))
    target.add_fallback("/v2/a", "/v1/a")

    async with _client(app) as client:
        response = await client.get("/v2/ab/x")

    assert response.status_code == 404


@pytest.mark.asyncio
async def test_static_folder_serves_files_and_falls_through(tmp_path):
    write(tmp_path, "public/hello.txt", "hi there")
    app = FastAPI()
    target = FastAPIMountTarget(app)
    target.serve_static(tmp_path / "public")
    target.include("/api", _router("api", "/ping"))

    async with _client(app) as client:
        asset = await client.get("/hello.txt")
        api = await client.get("/api/ping")
        missing = await client.get("/nothing.txt")

    assert asset.status_code == 200
    assert asset.text == "hi there"
    assert api.json() == {"tag": "api", "path": "/ping"}
    assert missing.status_code == 404


def test_include_rejects_non_router():
    with pytest.raises(TypeError):
        FastAPIMountTarget(FastAPI()).include("/a", object())
