"""Execution layer: one HTTP request to the Ghost Blog Smart API per tool call."""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Any, Dict, Optional
from urllib.parse import quote

import httpx

from .credentials import build_headers
from .logging import redact_payload
from .models import EffectiveCredentials, Outcome, RawOutcome, TimeoutClass, ToolDescriptor

logger = logging.getLogger(__name__)


_BODY_METHODS = {"POST", "PUT", "PATCH"}


class BackendInvoker:
    """Sends tool calls to the backend and classifies what came back.

    Calls are never retried here: post creation is not idempotent, so a
    repeat is always a new call from the client.
    """

    def __init__(
        self,
        base_url: str,
        fast_timeout_seconds: float = 30,
        slow_timeout_seconds: float = 300,
        user_agent: str = "Content-Creation-MCP/1.0",
        verify_ssl: bool = True,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.fast_timeout_seconds = fast_timeout_seconds
        self.slow_timeout_seconds = slow_timeout_seconds
        self.user_agent = user_agent
        self.verify_ssl = verify_ssl
        self.transport = transport

    def timeout_for(self, timeout_class: TimeoutClass) -> float:
        if timeout_class is TimeoutClass.SLOW:
            return self.slow_timeout_seconds
        return self.fast_timeout_seconds

    async def invoke(
        self,
        descriptor: ToolDescriptor,
        params: Dict[str, Any],
        credentials: EffectiveCredentials,
    ) -> RawOutcome:
        headers = build_headers(credentials)
        headers["User-Agent"] = self.user_agent
        headers["Content-Type"] = "application/json"

        url, used_keys = self._build_url(descriptor.path, params)
        method = descriptor.method.upper()
        query: Dict[str, str] = {}
        body: Optional[str] = None

        if method in _BODY_METHODS:
            body = json.dumps(self._extract_body_params(params, used_keys))
        else:
            query = self._extract_query_params(params, used_keys)

        timeout = self.timeout_for(descriptor.timeout_class)
        logger.info(
            "Dispatching tool=%s %s %s timeout=%ss headers=%s payload=%s",
            descriptor.name,
            method,
            url,
            timeout,
            redact_payload(headers),
            redact_payload(params),
        )

        try:
            response = await asyncio.wait_for(
                self._send(method, url, headers, query, body, timeout), timeout=timeout
            )
        except (asyncio.TimeoutError, httpx.TimeoutException):
            logger.warning("Backend call timed out tool=%s after %ss", descriptor.name, timeout)
            return RawOutcome(
                kind=Outcome.TIMED_OUT,
                error=f"Request timed out after {timeout:g} seconds.",
                timeout_seconds=timeout,
            )
        except httpx.TransportError as exc:
            logger.error("Backend transport failure tool=%s: %s", descriptor.name, exc)
            return RawOutcome(
                kind=Outcome.TRANSPORT_FAILED,
                error=f"API call failed: {str(exc) or type(exc).__name__}",
            )

        return self._classify(descriptor, response)

    async def _send(
        self,
        method: str,
        url: str,
        headers: Dict[str, str],
        query: Dict[str, str],
        body: Optional[str],
        timeout: float,
    ) -> httpx.Response:
        async with httpx.AsyncClient(
            timeout=timeout, verify=self.verify_ssl, transport=self.transport
        ) as client:
            return await client.request(
                method, url, headers=headers, params=query, content=body
            )

    def _classify(self, descriptor: ToolDescriptor, response: httpx.Response) -> RawOutcome:
        payload: Any = None
        if response.content:
            try:
                payload = response.json()
            except ValueError:
                payload = None

        if not response.is_success:
            message = self._error_message(payload) or response.text or response.reason_phrase
            logger.warning(
                "Backend returned HTTP %s for tool=%s", response.status_code, descriptor.name
            )
            return RawOutcome(
                kind=Outcome.BACKEND_FAILED,
                status_code=response.status_code,
                payload=payload,
                error=f"HTTP {response.status_code}: {message}",
            )

        if payload is None and response.content:
            return RawOutcome(
                kind=Outcome.BACKEND_FAILED,
                status_code=response.status_code,
                error="Backend returned a response that is not valid JSON",
            )

        if isinstance(payload, dict) and payload.get("success") is False:
            message = self._error_message(payload) or "Unknown API error"
            logger.warning("Backend reported failure for tool=%s: %s", descriptor.name, message)
            return RawOutcome(
                kind=Outcome.BACKEND_FAILED,
                status_code=response.status_code,
                payload=payload,
                error=message,
            )

        return RawOutcome(
            kind=Outcome.SUCCEEDED,
            status_code=response.status_code,
            payload=payload,
        )

    def _error_message(self, payload: Any) -> Optional[str]:
        if not isinstance(payload, dict):
            return None
        message = payload.get("error") or payload.get("message") or payload.get("detail")
        return str(message) if message else None

    def _build_url(self, path: str, params: Dict[str, Any]) -> tuple[str, set[str]]:
        url = self.base_url + path
        used_keys: set[str] = set()
        for key, value in params.items():
            token = f"{{{key}}}"
            if token in url:
                url = url.replace(token, quote(str(value), safe=""))
                used_keys.add(key)
        return url, used_keys

    def _extract_query_params(self, params: Dict[str, Any], used_keys: set[str]) -> Dict[str, str]:
        query: Dict[str, str] = {}
        for key, value in params.items():
            if key in used_keys or value is None:
                continue
            if isinstance(value, bool):
                query[key] = "true" if value else "false"
            elif isinstance(value, (str, int, float)):
                query[key] = str(value)
        return query

    def _extract_body_params(self, params: Dict[str, Any], used_keys: set[str]) -> Dict[str, Any]:
        return {key: value for key, value in params.items() if key not in used_keys}
