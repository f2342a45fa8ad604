"""Tests for the self-terminating demo server."""

import asyncio

import aiohttp
import pytest
from aiohttp.test_utils import TestClient, TestServer, unused_port

from src.demo.server import HELLO, create_app, run_demo


@pytest.fixture
async def client():
    client = TestClient(TestServer(create_app()))
    await client.start_server()
    yield client
    await client.close()


async def test_hello_on_root(client: TestClient) -> None:
    resp = await client.get("/")
    assert resp.status == 200
    assert await resp.text() == HELLO


async def test_hello_on_any_path_and_method(client: TestClient) -> None:
    for method, path in (("GET", "/a/b/c"), ("POST", "/anything"), ("DELETE", "/x")):
        resp = await client.request(method, path)
        assert resp.status == 200
        assert await resp.text() == "Hello World"


async def test_run_demo_serves_then_stops_itself() -> None:
    port = unused_port()
    task = asyncio.create_task(run_demo(port=port, lifetime=1.0))

    body = None
    async with aiohttp.ClientSession() as session:
        for _ in range(50):
            try:
                async with session.get(f"http://127.0.0.1:{port}/hi") as resp:
                    body = await resp.text()
                break
            except aiohttp.ClientConnectionError:
                await asyncio.sleep(0.02)
    assert body == HELLO

    await asyncio.wait_for(task, timeout=5)
    assert task.done()
