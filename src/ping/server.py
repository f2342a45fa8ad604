"""Hello-world ping service."""

from aiohttp import web

from src.web import make_app

GREETING = "Hello from the ping server!"
PONG = "pong 🏓"


async def _index(request: web.Request) -> web.Response:
    return web.Response(text=GREETING, content_type="text/plain")


async def _ping(request: web.Request) -> web.Response:
    return web.Response(text=PONG, content_type="text/plain")


def create_app() -> web.Application:
    app = make_app()
    app.router.add_get("/", _index)
    app.router.add_get("/ping", _ping)
    return app
