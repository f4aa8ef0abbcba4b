"""
Shared test fixtures for the gateway test suite.

Key fixtures:
- settings: Settings pinned to a fake backend address, with no .env lookup
- backend: an in-memory Ghost Blog Smart API built on httpx.MockTransport
  that records every request and answers through a swappable responder
- service: a GatewayService wired to the fake backend
- caller: an authenticated caller identity

No test opens a network connection: every outbound request is answered by
the MockTransport handler.
"""

import inspect
import json
from typing import Any, Callable, List

import httpx
import pytest

from ghost_gateway.config import Settings
from ghost_gateway.models import CallerIdentity
from ghost_gateway.service import GatewayService

BACKEND_URL = "https://ghost.test/ghost-blog-api"
SERVICE_KEY = "service-key-123"


def envelope(data: Any = None, success: bool = True, **extra: Any) -> dict:
    """Build a backend response envelope."""
    body: dict = {"success": success, "timestamp": "2025-01-01T00:00:00Z"}
    if data is not None:
        body["data"] = data
    body.update(extra)
    return body


class FakeBackend:
    """
    Stand-in for the Ghost Blog Smart API.

    Tests replace ``responder`` with any callable that takes an
    httpx.Request and returns (or awaits to) an httpx.Response. Raising an
    httpx exception from the responder simulates a network failure.
    """

    def __init__(self) -> None:
        self.requests: List[httpx.Request] = []
        self.responder: Callable[[httpx.Request], Any] = lambda request: httpx.Response(
            200, json=envelope({})
        )

    async def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        response = self.responder(request)
        if inspect.isawaitable(response):
            response = await response
        return response

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    @property
    def last_request(self) -> httpx.Request:
        assert self.requests, "backend received no request"
        return self.requests[-1]

    def last_json(self) -> dict:
        return json.loads(self.last_request.content or b"null")


@pytest.fixture
def make_settings():
    """Factory for Settings that never reads the developer's .env file."""

    def _make_settings(**overrides: Any) -> Settings:
        values: dict = {
            "ghost_blog_api_base_url": BACKEND_URL,
            "ghost_blog_api_key": SERVICE_KEY,
            "ghost_admin_api_key": None,
            "ghost_api_url": None,
            "gateway_allowed_usernames": None,
            "gateway_fast_timeout_seconds": 0.2,
            "gateway_slow_timeout_seconds": 2.0,
            "gateway_transport": "stdio",
            "github_client_id": None,
            "github_client_secret": None,
            "gateway_local_username": None,
        }
        values.update(overrides)
        return Settings(_env_file=None, **values)

    return _make_settings


@pytest.fixture
def settings(make_settings) -> Settings:
    return make_settings()


@pytest.fixture
def backend() -> FakeBackend:
    return FakeBackend()


@pytest.fixture
def make_service(make_settings, backend):
    def _make_service(**overrides: Any) -> GatewayService:
        return GatewayService.from_settings(make_settings(**overrides), transport=backend.transport)

    return _make_service


@pytest.fixture
def service(make_service) -> GatewayService:
    return make_service()


@pytest.fixture
def caller() -> CallerIdentity:
    return CallerIdentity(username="preangelleo", display_name="Leo")
