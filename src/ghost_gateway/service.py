"""Core gateway service: the per-call pipeline from tool call to result."""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from pydantic import ValidationError

from .catalog import get_descriptor, validate_arguments
from .config import Settings
from .credentials import resolve_credentials, split_override
from .executors import BackendInvoker
from .logging import redact_payload
from .models import CallerIdentity, CallResult, CredentialPair
from .normalizer import normalize, validation_failure

logger = logging.getLogger(__name__)


class GatewayService:
    """
    Executes catalog tools against the Ghost Blog Smart API.

    Pipeline per call:
    - validate arguments against the tool schema (nothing is sent on failure)
    - resolve credentials: call override, then environment, then backend default
    - dispatch one HTTP request with the tool's timeout class
    - normalise the outcome into a CallResult

    Holds only read-only configuration, so concurrent calls share nothing.
    """

    def __init__(
        self,
        service_key: str,
        environment_credential: CredentialPair,
        invoker: BackendInvoker,
    ) -> None:
        self.service_key = service_key
        self.environment_credential = environment_credential
        self.invoker = invoker

    @classmethod
    def from_settings(cls, settings: Settings, transport: Any = None) -> "GatewayService":
        invoker = BackendInvoker(
            base_url=settings.ghost_blog_api_base_url,
            fast_timeout_seconds=settings.gateway_fast_timeout_seconds,
            slow_timeout_seconds=settings.gateway_slow_timeout_seconds,
            user_agent=settings.ghost_blog_api_user_agent,
            verify_ssl=settings.ghost_blog_api_verify_ssl,
            transport=transport,
        )
        return cls(
            service_key=settings.ghost_blog_api_key,
            environment_credential=settings.environment_credential(),
            invoker=invoker,
        )

    async def execute_tool(
        self,
        tool_name: str,
        arguments: Optional[Dict[str, Any]],
        caller: CallerIdentity,
    ) -> CallResult:
        """
        Run one tool call.

        Args:
            tool_name: Catalog name of the tool
            arguments: Raw call arguments as received from the client
            caller: Authenticated identity of the caller

        Returns:
            CallResult describing success or the failure kind

        Raises:
            UnknownToolError: If the name is not in the catalog
        """
        descriptor = get_descriptor(tool_name)
        logger.info(
            "Executing tool=%s user=%s arguments=%s",
            tool_name,
            caller.username,
            redact_payload(arguments or {}),
        )

        try:
            params = validate_arguments(descriptor, arguments)
        except ValidationError as exc:
            logger.info("Rejected arguments for tool=%s: %s", tool_name, exc.error_count())
            return validation_failure(descriptor, _format_validation_error(exc))

        payload, override = split_override(params)
        credentials = resolve_credentials(
            override if descriptor.accepts_override else None,
            self.environment_credential,
            self.service_key,
        )

        outcome = await self.invoker.invoke(descriptor, payload, credentials)
        result = normalize(descriptor, outcome, payload)
        logger.info(
            "Finished tool=%s user=%s outcome=%s",
            tool_name,
            caller.username,
            result.outcome.value,
        )
        return result


def _format_validation_error(exc: ValidationError) -> str:
    parts = []
    for error in exc.errors():
        location = ".".join(str(item) for item in error.get("loc", ())) or "arguments"
        parts.append(f"{location}: {error.get('msg')}")
    return "; ".join(parts)
