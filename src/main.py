"""Service entry point.

Usage::

    python -m src.main memory            # memory CRUD API (default: $SERVICE)
    python -m src.main ping --port 8080
    python -m src.main messages
    python -m src.main demo              # exits on its own after 3 seconds
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys

from src.config import settings

logging.basicConfig(
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
)
logger = logging.getLogger(__name__)

SERVICES = ("memory", "ping", "messages", "demo")


async def _serve_memory(port: int | None) -> None:
    from src.memory.server import create_app
    from src.memory.store import MemoryStore
    from src.web import WebServer

    store = MemoryStore.get()
    await store.initialise()
    await WebServer(create_app(store), "Memory", port=port).run()


async def _serve_ping(port: int | None) -> None:
    from src.ping.server import create_app
    from src.web import WebServer

    await WebServer(create_app(), "Ping", port=port).run()


async def _serve_messages(port: int | None) -> None:
    from src.messages.server import create_app
    from src.web import WebServer

    await WebServer(create_app(), "Message log", port=port).run()


async def _serve_demo(port: int | None) -> None:
    from src.demo.server import run_demo

    await run_demo(port=port)


_RUNNERS = {
    "memory": _serve_memory,
    "ping": _serve_ping,
    "messages": _serve_messages,
    "demo": _serve_demo,
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Run one of the HTTP services.")
    parser.add_argument(
        "service",
        nargs="?",
        choices=SERVICES,
        default=settings.service if settings.service in SERVICES else "memory",
        help="Which service to run (default: $SERVICE or memory)",
    )
    parser.add_argument("--port", type=int, default=None, help="Listen port (default: $PORT)")
    return parser


def main(argv: list[str] | None = None) -> int:
    """Run the selected service until it stops. Returns the process exit code."""
    args = build_parser().parse_args(argv)
    logger.info("Starting %s service (environment=%s)...", args.service, settings.environment)
    try:
        asyncio.run(_RUNNERS[args.service](args.port))
    except KeyboardInterrupt:
        logger.info("Interrupted")
    except Exception:
        logger.exception("%s service failed", args.service)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
