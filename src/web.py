"""Shared aiohttp plumbing for all services.

Every service builds its own ``web.Application`` through ``make_app()`` so
they all get the same route-boundary error handling, permissive CORS and
request-size limit, and runs it through ``WebServer`` (AppRunner/TCPSite).
"""

from __future__ import annotations

import asyncio
import logging
import signal
from typing import Any

from aiohttp import web

from src.config import settings

logger = logging.getLogger(__name__)

# Roughly morgan's "tiny": method url status length - response time
ACCESS_LOG_FORMAT = '%r %s %b - %Tf'

_CORS_HEADERS = {
    "Access-Control-Allow-Methods": "GET,HEAD,PUT,PATCH,POST,DELETE",
    "Access-Control-Allow-Headers": "Content-Type, Authorization",
}


@web.middleware
async def error_middleware(request: web.Request, handler) -> web.StreamResponse:
    """Turn any unhandled exception into a 500 carrying the error's message."""
    try:
        return await handler(request)
    except web.HTTPException:
        raise
    except Exception as exc:
        logger.exception("Request failed: %s %s", request.method, request.path)
        return web.json_response({"error": str(exc)}, status=500)


@web.middleware
async def cors_middleware(request: web.Request, handler) -> web.StreamResponse:
    """Allow cross-origin calls from anywhere and answer preflight requests."""
    origin = settings.cors_allow_origin
    if request.method == "OPTIONS" and "Access-Control-Request-Method" in request.headers:
        return web.Response(
            status=204,
            headers={"Access-Control-Allow-Origin": origin, **_CORS_HEADERS},
        )
    try:
        response = await handler(request)
    except web.HTTPException as exc:
        exc.headers["Access-Control-Allow-Origin"] = origin
        raise
    response.headers["Access-Control-Allow-Origin"] = origin
    return response


def make_app() -> web.Application:
    """Return an Application with the shared middlewares and body limit."""
    return web.Application(
        middlewares=[cors_middleware, error_middleware],
        client_max_size=settings.max_body_bytes,
    )


class InvalidJSONError(ValueError):
    """Raised when a request body cannot be decoded as JSON."""


async def read_json(request: web.Request) -> dict[str, Any]:
    """Decode a JSON object body.

    An empty body or a non-object payload yields ``{}``.  Undecodable bodies
    raise ``InvalidJSONError``.
    """
    if not request.can_read_body:
        return {}
    try:
        payload = await request.json()
    except ValueError as exc:
        msg = "invalid JSON"
        raise InvalidJSONError(msg) from exc
    return payload if isinstance(payload, dict) else {}


def bad_request(message: str) -> web.Response:
    return web.json_response({"error": message}, status=400)


class WebServer:
    """Manages an aiohttp application's lifecycle."""

    def __init__(
        self,
        app: web.Application,
        name: str,
        host: str | None = None,
        port: int | None = None,
    ) -> None:
        self.app = app
        self.name = name
        self.host = host or settings.host
        self.port = settings.port if port is None else port
        self._runner: web.AppRunner | None = None
        self._stopped = asyncio.Event()

    @property
    def running(self) -> bool:
        return self._runner is not None

    async def start(self) -> None:
        """Start listening."""
        self._stopped.clear()
        self._runner = web.AppRunner(self.app, access_log_format=ACCESS_LOG_FORMAT)
        await self._runner.setup()
        site = web.TCPSite(self._runner, self.host, self.port)
        await site.start()
        logger.info("%s server running on %s:%d", self.name, self.host, self.port)

    async def stop(self) -> None:
        """Shut down the server gracefully."""
        if self._runner is not None:
            await self._runner.cleanup()
            self._runner = None
            logger.info("%s server stopped", self.name)
        self._stopped.set()

    def request_stop(self) -> None:
        """Ask a running ``run()`` to return (safe from signal handlers)."""
        self._stopped.set()

    async def run(self, duration: float | None = None) -> None:
        """Serve until stopped by a signal, ``request_stop()``, or *duration* seconds."""
        await self.start()
        loop = asyncio.get_running_loop()
        installed = []
        for sig in (signal.SIGINT, signal.SIGTERM):
            try:
                loop.add_signal_handler(sig, self.request_stop)
                installed.append(sig)
            except (NotImplementedError, RuntimeError):
                logger.debug("Signal handlers unavailable for %s", sig.name)
        try:
            if duration is None:
                await self._stopped.wait()
            else:
                try:
                    await asyncio.wait_for(self._stopped.wait(), timeout=duration)
                except TimeoutError:
                    logger.info("%s server lifetime of %.1fs elapsed", self.name, duration)
        finally:
            for sig in installed:
                loop.remove_signal_handler(sig)
            await self.stop()
