"""Runner protocol and the foreground uvicorn server runner."""

from __future__ import annotations

import asyncio
from typing import Protocol, runtime_checkable

import structlog

from pusu.server import PushServer
from pusu.subscription import Subscription

logger = structlog.get_logger()


@runtime_checkable
class Runner(Protocol):
    """Keeps the serving process alive for a prepared subscription."""

    def run(self, subscription: Subscription) -> None:
        """Block while serving; raise if serving cannot start or fails."""
        ...


class ServerRunner:
    """Runs a :class:`PushServer` in the foreground until interrupted."""

    def __init__(self, server: PushServer) -> None:
        self._server = server

    @property
    def server(self) -> PushServer:
        return self._server

    def run(self, subscription: Subscription) -> None:
        logger.info(
            "runner.starting",
            subscription=subscription.name,
            port=self._server.port,
        )
        try:
            asyncio.run(self._server.serve_forever())
        except KeyboardInterrupt:
            logger.info("runner.interrupted", subscription=subscription.name)
