"""HTTP routes for the memory service."""

from __future__ import annotations

import logging

from aiohttp import web
from pydantic import ValidationError

from src.memory.models import NewMemory
from src.memory.remember import NOTE_IMPORTANCE, NOTE_KEY, NOTE_TAGS, build_reply, extract_note
from src.memory.store import MemoryStore
from src.web import InvalidJSONError, bad_request, make_app, read_json

logger = logging.getLogger(__name__)

STORE_KEY = web.AppKey("memory_store", MemoryStore)

BANNER = "Chat-memory is live! • /memory/:userId, /message"


def _store(request: web.Request) -> MemoryStore:
    return request.app[STORE_KEY]


def _validation_message(exc: ValidationError) -> str:
    first = exc.errors()[0]
    field = ".".join(str(part) for part in first["loc"])
    return f"{field}: {first['msg']}" if field else first["msg"]


async def _index(request: web.Request) -> web.Response:
    return web.Response(text=BANNER, content_type="text/plain")


async def _healthz(request: web.Request) -> web.Response:
    """GET /healthz — checks the database round-trip."""
    try:
        await _store(request).ping()
    except Exception as exc:
        logger.exception("Health check failed")
        return web.json_response({"ok": False, "error": str(exc)}, status=500)
    return web.json_response({"ok": True})


async def _list_memories(request: web.Request) -> web.Response:
    records = await _store(request).list(request.match_info["user_id"])
    return web.json_response([r.model_dump(mode="json") for r in records])


async def _add_memory(request: web.Request) -> web.Response:
    try:
        body = await read_json(request)
    except InvalidJSONError as exc:
        return bad_request(str(exc))

    if not body.get("value"):
        return bad_request("value is required")
    try:
        new = NewMemory.model_validate(body)
    except ValidationError as exc:
        return bad_request(_validation_message(exc))

    memory_id = await _store(request).add(
        request.match_info["user_id"],
        new.value,
        key=new.key,
        tags=new.tags,
        importance=new.importance,
    )
    return web.json_response({"id": memory_id}, status=201)


async def _delete_memory(request: web.Request) -> web.Response:
    await _store(request).delete(request.match_info["user_id"], request.match_info["memory_id"])
    return web.json_response({"ok": True})


async def _clear_memories(request: web.Request) -> web.Response:
    await _store(request).clear(request.match_info["user_id"])
    return web.json_response({"ok": True})


async def _message(request: web.Request) -> web.Response:
    """POST /message — canned reply, storing a note when the text asks to remember."""
    try:
        body = await read_json(request)
    except InvalidJSONError as exc:
        return bad_request(str(exc))

    user_id = body.get("userId")
    text = body.get("text")
    if not user_id or not text or not isinstance(text, str):
        return bad_request("userId and text are required")
    user_id = str(user_id)

    store = _store(request)
    stored = None
    match = extract_note(text)
    if match is not None:
        memory_id = await store.add(
            user_id,
            match.value,
            key=NOTE_KEY,
            tags=list(NOTE_TAGS),
            importance=NOTE_IMPORTANCE,
        )
        stored = {"id": memory_id, "value": match.value}
        logger.info("Remembered note %s for user=%s", memory_id, user_id)

    count = await store.count(user_id)
    return web.json_response(
        {"reply": build_reply(match, count), "memories_count": count, "stored": stored}
    )


def create_app(store: MemoryStore | None = None) -> web.Application:
    """Build the memory service Application."""
    app = make_app()
    app[STORE_KEY] = store or MemoryStore.get()
    app.router.add_get("/", _index)
    app.router.add_get("/healthz", _healthz)
    app.router.add_get("/memory/{user_id}", _list_memories)
    app.router.add_post("/memory/{user_id}", _add_memory)
    app.router.add_delete("/memory/{user_id}/{memory_id}", _delete_memory)
    app.router.add_delete("/memory/{user_id}", _clear_memories)
    app.router.add_post("/message", _message)
    return app
