"""Shared fixtures: mock upstream services served on a local port."""

import os
from typing import Any
from unittest import mock

import pytest_asyncio
from aiohttp import web
from aiohttp.test_utils import TestServer

from src.order_api.mock_api import create_app, request_log_middleware

TOKEN = "test-token"


def upstream_env(base_url: str, **overrides: str) -> dict[str, str]:
    env = {
        "ORDER_QUERIES_API_BASE_URL": base_url,
        "ORDER_COMMANDS_API_BASE_URL": base_url,
        "PRODUCT_QUERIES_API_BASE_URL": base_url,
        "ORDER_API_TOKEN": TOKEN,
    }
    env.update(overrides)
    return env


@pytest_asyncio.fixture
async def serve():
    """Start an aiohttp app and point every base URL at it."""
    servers: list[TestServer] = []
    patchers = []

    async def _serve(app: web.Application, **env_overrides: str) -> web.Application:
        server = TestServer(app)
        await server.start_server()
        servers.append(server)
        base_url = str(server.make_url("/")).rstrip("/")
        patcher = mock.patch.dict(os.environ, upstream_env(base_url, **env_overrides), clear=True)
        patcher.start()
        patchers.append(patcher)
        return app

    yield _serve

    for patcher in reversed(patchers):
        patcher.stop()
    for server in servers:
        await server.close()


@pytest_asyncio.fixture
async def upstream(serve):
    """The mock order/product services with the sample dataset."""
    return await serve(create_app(token=TOKEN))


@pytest_asyncio.fixture
async def stub_upstream(serve):
    """Serve canned replies: ``await stub_upstream(("GET", "/Orders", 200, {...}), ...)``.

    A ``str`` payload is sent as plain text, anything else as JSON.
    """

    async def _stub(*routes: tuple[str, str, int, Any], **env_overrides: str) -> web.Application:
        app = web.Application(middlewares=[request_log_middleware])
        app["requests"] = []
        for method, path, status, payload in routes:
            app.router.add_route(method, path, _canned(status, payload))
        return await serve(app, **env_overrides)

    return _stub


def _canned(status: int, payload: Any):
    async def handler(_request: web.Request) -> web.Response:
        if isinstance(payload, str):
            return web.Response(text=payload, status=status)
        return web.json_response(payload, status=status)

    return handler
