"""Backend client protocol — the remote operations provisioning depends on."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Protocol, runtime_checkable


@dataclass(frozen=True)
class PushSubscriptionConfig:
    """Settings a new push subscription is created with."""

    topic: Any
    ack_deadline_seconds: int
    push_endpoint: str


@runtime_checkable
class BackendClient(Protocol):
    """Checks and creates topics and push subscriptions on a pub/sub backend.

    Handles returned by :meth:`topic` and :meth:`subscription` are opaque to
    callers; they are only passed back into the same client.
    """

    def topic(self, name: str) -> Any:
        """Return a handle for the topic *name* without contacting the backend."""
        ...

    def topic_exists(self, topic: Any) -> bool:
        """Report whether the topic behind *topic* exists."""
        ...

    def create_topic(self, name: str) -> Any:
        """Create the topic *name* and return its handle."""
        ...

    def subscription(self, name: str) -> Any:
        """Return a handle for the subscription *name*."""
        ...

    def subscription_exists(self, subscription: Any) -> bool:
        """Report whether the subscription behind *subscription* exists."""
        ...

    def create_subscription(self, name: str, config: PushSubscriptionConfig) -> Any:
        """Create the push subscription *name* configured by *config*."""
        ...
