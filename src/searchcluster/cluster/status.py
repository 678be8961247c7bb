"""
Status server for the search cluster.
"""

from typing import Any, Dict

from fastapi import FastAPI
from uvicorn import Config, Server

from searchcluster.cluster.router import ClusterRouter
from searchcluster.platform.config import settings
from searchcluster.platform.logging import get_logger

logger = get_logger(__name__)


def create_status_app(router: ClusterRouter) -> FastAPI:
    """Create FastAPI application reporting host health."""
    app = FastAPI(title="SearchCluster Status", version=settings.VERSION)

    @app.get("/health")
    async def health() -> Dict[str, Any]:
        """Health check endpoint."""
        hosts = await router.check_health()

        enabled = [h for h in hosts if not h["disabled"]]
        readable = [h for h in enabled if "read" in h["roles"] and h["reachable"]]
        writable = [h for h in enabled if "write" in h["roles"] and h["reachable"]]
        is_healthy = bool(enabled) and all(h["reachable"] for h in enabled)

        return {
            "status": "alive" if is_healthy else "degraded",
            "version": settings.VERSION,
            "readable": len(readable),
            "writable": len(writable),
            "hosts": hosts,
        }

    return app


async def start_status_server(router: ClusterRouter, port: int | None = None) -> None:
    """
    Start a lightweight HTTP server for cluster status.

    Args:
        router: The ClusterRouter whose hosts are reported.
        port: Port to listen on (defaults to settings.SEARCH_STATUS_PORT).
    """
    app = create_status_app(router)

    listen_port = port or settings.SEARCH_STATUS_PORT
    logger.info("starting_status_server", port=listen_port)

    config = Config(
        app=app,
        host="0.0.0.0",
        port=listen_port,
        log_level="error",
        loop="asyncio",
    )
    server = Server(config)

    await server.serve()
