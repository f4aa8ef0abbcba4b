"""CLI entry point for the Ghost Blog Gateway."""

from __future__ import annotations

import asyncio
import logging

import uvicorn

from .config import Settings, get_settings
from .logging import configure_logging
from .server import build_server

logger = logging.getLogger(__name__)


async def _serve_http(app, settings: Settings) -> None:  # type: ignore[no-untyped-def]
    logger.info(
        "Serving %s over %s on %s:%s",
        settings.service_name,
        settings.gateway_transport,
        settings.gateway_host,
        settings.gateway_port,
    )
    config = uvicorn.Config(
        app,
        host=settings.gateway_host,
        port=settings.gateway_port,
        log_level=settings.gateway_log_level.lower(),
    )
    await uvicorn.Server(config).serve()


async def _run() -> None:
    settings = get_settings()
    configure_logging(settings.gateway_log_level)

    mcp, app = build_server(settings)
    # build_server only returns no app for stdio.
    if app is None:
        await mcp.run_stdio_async()
    else:
        await _serve_http(app, settings)


def main() -> None:
    asyncio.run(_run())


if __name__ == "__main__":
    main()
