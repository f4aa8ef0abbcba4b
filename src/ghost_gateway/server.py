"""MCP server setup for the Ghost Blog Gateway."""

from __future__ import annotations

import json
import logging
from typing import Any, Callable, Dict, Optional

import httpx
from fastmcp import FastMCP
from fastmcp.exceptions import ToolError
from fastmcp.tools.tool import Tool, ToolResult
from mcp.types import TextContent
from pydantic import PrivateAttr
from starlette.middleware.cors import CORSMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse

from .access import AccessPolicyMiddleware
from .auth import build_auth_provider, current_caller
from .catalog import TOOL_CATALOG, input_schema
from .config import Settings
from .models import CallerIdentity, ToolDescriptor
from .service import GatewayService

logger = logging.getLogger(__name__)


CallerResolver = Callable[[], CallerIdentity]

# "http" is FastMCP's alias for streamable HTTP.
_STREAMABLE_TRANSPORTS = {"http", "streamable-http", "streamablehttp"}


class GatewayTool(Tool):
    """MCP tool backed by a catalog descriptor and the shared gateway service."""

    _service: Any = PrivateAttr(default=None)
    _caller_resolver: Any = PrivateAttr(default=None)

    @classmethod
    def from_descriptor(
        cls,
        descriptor: ToolDescriptor,
        service: GatewayService,
        caller_resolver: CallerResolver,
    ) -> "GatewayTool":
        tool = cls(
            name=descriptor.name,
            description=descriptor.description,
            parameters=input_schema(descriptor),
            tags={descriptor.timeout_class.value},
        )
        tool._service = service
        tool._caller_resolver = caller_resolver
        return tool

    async def run(self, arguments: Dict[str, Any]) -> ToolResult:
        caller = self._caller_resolver()
        result = await self._service.execute_tool(self.name, arguments, caller)
        if not result.ok:
            raise ToolError(result.error)
        payload = result.to_dict()
        return ToolResult(
            content=[TextContent(type="text", text=json.dumps(payload, indent=2, default=str))],
            structured_content=payload,
        )


def build_server(
    settings: Settings,
    caller_resolver: Optional[CallerResolver] = None,
    backend_transport: Optional[httpx.AsyncBaseTransport] = None,
) -> tuple[FastMCP, object | None]:
    auth_provider = build_auth_provider(settings)
    if caller_resolver is None:
        caller_resolver = _default_caller_resolver(settings, auth_provider is not None)

    service = GatewayService.from_settings(settings, transport=backend_transport)
    allowed = settings.allowed_usernames()

    mcp = FastMCP(
        settings.service_name,
        instructions=_instructions(),
        auth=auth_provider,
        middleware=[AccessPolicyMiddleware(allowed, caller_resolver)],
    )
    _attach_healthcheck(mcp)

    for descriptor in TOOL_CATALOG.values():
        mcp.add_tool(GatewayTool.from_descriptor(descriptor, service, caller_resolver))
        logger.info("Registered tool: %s", descriptor.name)

    if allowed:
        logger.info("Private mode: tools limited to %s user(s)", len(allowed))
    else:
        logger.info("Public mode: every authenticated user may call tools")

    app = _get_http_app(mcp, settings)
    return mcp, app


def _default_caller_resolver(settings: Settings, has_auth: bool) -> CallerResolver:
    if has_auth:
        return current_caller
    if not settings.gateway_local_username:
        raise RuntimeError(
            "No caller identity source: configure GITHUB_CLIENT_ID and GITHUB_CLIENT_SECRET "
            "or set GATEWAY_LOCAL_USERNAME"
        )
    local = CallerIdentity(
        username=settings.gateway_local_username,
        display_name=settings.gateway_local_username,
    )
    logger.warning("No OAuth provider; all calls run as local user %s", local.username)
    return lambda: local


def _attach_healthcheck(mcp: FastMCP) -> None:
    @mcp.custom_route("/health", methods=["GET"])
    async def healthcheck(_request: Request) -> JSONResponse:
        return JSONResponse({"status": "ok"})


def _instructions() -> str:
    return (
        "Ghost blog content gateway. Create, search, update and delete posts, "
        "generate posts and feature images with AI, and read blog statistics. "
        "Use is_test=true to try post creation without publishing anything."
    )


def _get_http_app(mcp: FastMCP, settings: Settings):  # type: ignore[no-untyped-def]
    transport = settings.gateway_transport.lower()
    if transport == "stdio":
        return None
    if transport in _STREAMABLE_TRANSPORTS:
        app = mcp.http_app(transport="streamable-http", stateless_http=True, json_response=True)
    elif transport == "sse":
        app = mcp.http_app(transport="sse")
    else:
        raise ValueError(f"Unsupported transport: {settings.gateway_transport}")
    _attach_cors(app)
    return app


def _attach_cors(app) -> None:  # type: ignore[no-untyped-def]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["mcp-session-id"],
    )
