"""Unit tests for ServerRunner."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock

import pytest

from pusu.runner import ServerRunner
from pusu.server import PushServer
from pusu.subscription import Subscription


def _sub() -> Subscription:
    return Subscription(topic="test", name="testing", handler=lambda m: None)


class TestServerRunner:
    def test_runs_server_until_it_returns(self):
        server = MagicMock(spec=PushServer)
        server.port = 8080
        server.serve_forever = AsyncMock(return_value=None)

        ServerRunner(server).run(_sub())

        server.serve_forever.assert_awaited_once()

    def test_startup_error_propagates(self):
        server = MagicMock(spec=PushServer)
        server.port = 8080
        server.serve_forever = AsyncMock(side_effect=OSError("address in use"))

        with pytest.raises(OSError, match="address in use"):
            ServerRunner(server).run(_sub())
