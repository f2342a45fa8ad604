"""HTTP routes for the file-backed message log."""

from __future__ import annotations

import logging

from aiohttp import web

from src.messages.log import MessageLog
from src.web import InvalidJSONError, bad_request, make_app, read_json

logger = logging.getLogger(__name__)

LOG_KEY = web.AppKey("message_log", MessageLog)


async def _list_messages(request: web.Request) -> web.Response:
    return web.json_response(request.app[LOG_KEY].read())


async def _post_message(request: web.Request) -> web.Response:
    try:
        body = await read_json(request)
    except InvalidJSONError as exc:
        return bad_request(str(exc))

    user = body.get("user")
    text = body.get("text")
    if not user or not text:
        return bad_request("user and text are required")

    entry = await request.app[LOG_KEY].append(str(user), str(text))
    return web.json_response(entry, status=201)


def create_app(message_log: MessageLog | None = None) -> web.Application:
    """Build the message log Application."""
    app = make_app()
    app[LOG_KEY] = message_log or MessageLog()
    app.router.add_get("/messages", _list_messages)
    app.router.add_post("/messages", _post_message)
    return app
