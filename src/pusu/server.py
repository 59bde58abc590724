"""FastAPI app hosting the push endpoints of registered subscriptions.

Requests are served by uvicorn.  A catch-all route hands every request to the
dispatcher bound under its path; ``/healthz`` answers liveness checks.
"""

from __future__ import annotations

import asyncio
from types import MappingProxyType

import structlog
import uvicorn
from fastapi import FastAPI, Request, Response

from pusu.dispatcher import (
    ERROR_NOT_FOUND,
    PushRequest,
    PushResponse,
    WebhookDispatcher,
)
from pusu.errors import ValidationError
from pusu.subscription import Subscription

logger = structlog.get_logger()

HEALTH_PATH = "/healthz"
_METHODS = ["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]
_STARTUP_POLL_SECONDS = 0.01


class PushServer:
    """Routes inbound push requests to their :class:`WebhookDispatcher`.

    Parameters
    ----------
    port:
        TCP port to listen on.  ``0`` picks a free port, readable from
        :attr:`port` after :meth:`start`.
    bind_host:
        Interface to bind.

    Subscriptions are registered before :meth:`start`; the route table is
    frozen when serving begins.
    """

    def __init__(self, port: int, *, bind_host: str = "0.0.0.0") -> None:  # noqa: S104
        self._port = port
        self._bind_host = bind_host
        self._pending: dict[str, WebhookDispatcher] = {}
        self._routes: MappingProxyType[str, WebhookDispatcher] | None = None
        self._server: uvicorn.Server | None = None
        self._task: asyncio.Task[None] | None = None
        self.app = self._build_app()

    @property
    def port(self) -> int:
        return self._port

    @property
    def routes(self) -> MappingProxyType[str, WebhookDispatcher]:
        if self._routes is not None:
            return self._routes
        return MappingProxyType(dict(self._pending))

    def register(self, subscription: Subscription) -> WebhookDispatcher:
        """Bind a new dispatcher for *subscription* under its registration path."""
        if self._routes is not None:
            msg = "Cannot register subscriptions after the server has started"
            raise ValidationError(msg)
        dispatcher = WebhookDispatcher(subscription)
        path = dispatcher.registration_path
        if path in self._pending:
            msg = f"A subscription is already registered at {path}"
            raise ValidationError(msg)
        self._pending[path] = dispatcher
        logger.info(
            "server.subscription_registered",
            topic=subscription.topic,
            subscription=subscription.name,
            path=path,
        )
        return dispatcher

    def freeze(self) -> None:
        """Close registration; later :meth:`register` calls are rejected."""
        if self._routes is None:
            self._routes = MappingProxyType(dict(self._pending))

    async def dispatch(self, request: PushRequest) -> PushResponse:
        """Route a parsed request to its dispatcher."""
        if request.path == HEALTH_PATH and request.method == "GET":
            return PushResponse(200, "ok")
        dispatcher = self.routes.get(request.path)
        if dispatcher is None:
            return PushResponse(404, ERROR_NOT_FOUND)
        return await dispatcher.handle(request)

    def _build_app(self) -> FastAPI:
        app = FastAPI(title="pusu push endpoints", docs_url=None, redoc_url=None)

        @app.api_route("/{path:path}", methods=_METHODS)
        async def push(request: Request) -> Response:
            push_request = PushRequest(
                method=request.method,
                path=request.url.path,
                body=await request.body(),
                headers=MappingProxyType(dict(request.headers)),
            )
            response = await self.dispatch(push_request)
            logger.debug(
                "server.request",
                method=push_request.method,
                path=push_request.path,
                status=response.status,
            )
            return Response(
                content=response.body,
                status_code=response.status,
                media_type="text/plain",
            )

        return app

    async def start(self) -> None:
        """Start uvicorn in the background and wait until it is listening."""
        self.freeze()
        config = uvicorn.Config(
            self.app,
            host=self._bind_host,
            port=self._port,
            lifespan="off",
            log_config=None,
            access_log=False,
        )
        server = uvicorn.Server(config)
        task = asyncio.create_task(server.serve())
        while not server.started:
            if task.done():
                # uvicorn exits during startup when the socket cannot be bound.
                task.result()
                msg = f"Server on {self._bind_host}:{self._port} exited during startup"
                raise RuntimeError(msg)
            await asyncio.sleep(_STARTUP_POLL_SECONDS)
        self._server = server
        self._task = task
        self._port = server.servers[0].sockets[0].getsockname()[1]
        logger.info(
            "server.started",
            host=self._bind_host,
            port=self._port,
            paths=sorted(self.routes),
        )

    async def stop(self) -> None:
        if self._server is not None and self._task is not None:
            self._server.should_exit = True
            await self._task
            self._server = None
            self._task = None
            logger.info("server.stopped")

    async def serve_forever(self) -> None:
        """Start (if needed) and serve until cancelled."""
        if self._task is None:
            await self.start()
        task = self._task
        if task is None:
            msg = "Server is not running"
            raise RuntimeError(msg)
        try:
            await asyncio.shield(task)
        finally:
            await self.stop()
