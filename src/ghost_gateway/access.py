"""Caller allow-list policy and the MCP middleware that enforces it."""

from __future__ import annotations

import logging
from typing import AbstractSet, Callable, Sequence

from fastmcp.exceptions import NotFoundError
from fastmcp.server.middleware import CallNext, Middleware, MiddlewareContext
from fastmcp.tools.tool import Tool, ToolResult
from mcp.types import CallToolRequestParams, ListToolsRequest

from .models import CallerIdentity

logger = logging.getLogger(__name__)


def is_permitted(caller: CallerIdentity, allowed_usernames: AbstractSet[str]) -> bool:
    """An empty allow-list is public mode; otherwise exact, case-sensitive match."""
    if not allowed_usernames:
        return True
    return caller.username in allowed_usernames


class AccessPolicyMiddleware(Middleware):
    """Hides the whole tool surface from callers outside the allow-list.

    Denied callers get an empty ``tools/list`` and every ``tools/call`` is
    answered as if the tool did not exist.
    """

    def __init__(
        self,
        allowed_usernames: AbstractSet[str],
        caller_resolver: Callable[[], CallerIdentity],
    ) -> None:
        self.allowed_usernames = frozenset(allowed_usernames)
        self.caller_resolver = caller_resolver

    def _permitted(self) -> tuple[CallerIdentity, bool]:
        caller = self.caller_resolver()
        return caller, is_permitted(caller, self.allowed_usernames)

    async def on_list_tools(
        self,
        context: MiddlewareContext[ListToolsRequest],
        call_next: CallNext[ListToolsRequest, Sequence[Tool]],
    ) -> Sequence[Tool]:
        caller, permitted = self._permitted()
        if not permitted:
            logger.info("Tool surface withheld for user=%s", caller.username)
            return []
        return await call_next(context)

    async def on_call_tool(
        self,
        context: MiddlewareContext[CallToolRequestParams],
        call_next: CallNext[CallToolRequestParams, ToolResult],
    ) -> ToolResult:
        caller, permitted = self._permitted()
        if not permitted:
            logger.warning(
                "Denied tool call tool=%s user=%s", context.message.name, caller.username
            )
            raise NotFoundError(f"Unknown tool: {context.message.name}")
        return await call_next(context)
