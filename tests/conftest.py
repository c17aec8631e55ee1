import httpx
import pytest
from fastapi import FastAPI, Request
from starlette.testclient import TestClient

from lightrag_plugin.config import ForwardingTarget, LightRAGConfig, get_lightrag_config
from lightrag_plugin.router import get_config, get_transport, router
from tests.stubs import REMOTE_URL, RecordingTransport, make_echo_app


@pytest.fixture(autouse=True)
def clear_config_cache():
    get_lightrag_config.cache_clear()
    yield
    get_lightrag_config.cache_clear()


@pytest.fixture
def config():
    return LightRAGConfig(
        proxy_url=REMOTE_URL,
        timeout=5.0,
        max_upload_bytes=1024,
    )


@pytest.fixture
def target():
    return ForwardingTarget(REMOTE_URL)


@pytest.fixture
def echo_transport():
    return httpx.ASGITransport(app=make_echo_app())


def build_app(config, transport, user=None) -> FastAPI:
    """App with the LightRAG router, config and transport overridden."""
    app = FastAPI()

    if user is not None:
        @app.middleware("http")
        async def attach_user(request: Request, call_next):
            request.state.user = user
            return await call_next(request)

    app.include_router(router)
    app.dependency_overrides[get_config] = lambda: config
    app.dependency_overrides[get_transport] = lambda: transport
    return app


@pytest.fixture
def make_client(config):
    """Factory: (handler, user=None) -> (TestClient, RecordingTransport)."""
    clients = []

    def _make(handler, user=None):
        transport = RecordingTransport(handler)
        client = TestClient(build_app(config, transport, user))
        clients.append(client)
        return client, transport

    yield _make

    for client in clients:
        client.close()
