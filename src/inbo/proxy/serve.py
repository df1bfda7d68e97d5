"""Run the same-origin proxy with uvicorn."""

from __future__ import annotations

import logging

from inbo.config import Settings, get_settings

logger = logging.getLogger(__name__)


def run_proxy(
    host: str | None = None,
    port: int | None = None,
    settings: Settings | None = None,
) -> None:
    """Serve the proxy until interrupted."""
    import uvicorn

    from inbo.proxy.app import create_proxy_app

    settings = settings or get_settings()
    host = host or settings.proxy_host
    port = port or settings.proxy_port

    logger.info("Proxying http://%s:%d/api/* -> %s/api/*", host, port, settings.api_base_url)
    uvicorn.run(
        create_proxy_app(settings),
        host=host,
        port=port,
        log_level=settings.log_level.lower(),
    )
