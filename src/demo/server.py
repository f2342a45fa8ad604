"""Self-terminating "Hello World" server."""

from __future__ import annotations

import logging

from aiohttp import web

from src.config import settings
from src.web import WebServer, make_app

logger = logging.getLogger(__name__)

HELLO = "Hello World"


async def _hello(request: web.Request) -> web.Response:
    return web.Response(text=HELLO, content_type="text/plain")


def create_app() -> web.Application:
    app = make_app()
    app.router.add_route("*", "/{tail:.*}", _hello)
    return app


async def run_demo(port: int | None = None, lifetime: float | None = None) -> None:
    """Serve ``Hello World`` on every path, then shut down after *lifetime* seconds."""
    lifetime = settings.demo_shutdown_seconds if lifetime is None else lifetime
    server = WebServer(create_app(), "Demo", port=port)
    logger.info("Demo server will stop itself in %.1fs", lifetime)
    await server.run(duration=lifetime)
