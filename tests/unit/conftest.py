"""Shared fixtures: an in-memory backend and ready-made subscriptions."""

from __future__ import annotations

import base64
import json
from typing import Any

import pytest

from pusu.backends.base import PushSubscriptionConfig
from pusu.subscription import Message, Subscription


class FakeBackend:
    """In-memory BackendClient that records every call by name."""

    def __init__(
        self,
        topics: set[str] | None = None,
        subscriptions: dict[str, PushSubscriptionConfig] | None = None,
    ) -> None:
        self.topics: set[str] = set(topics or ())
        self.subscriptions: dict[str, PushSubscriptionConfig] = dict(
            subscriptions or {}
        )
        self.calls: list[str] = []

    def topic(self, name: str) -> tuple[str, str]:
        self.calls.append("topic")
        return ("topic", name)

    def topic_exists(self, topic: tuple[str, str]) -> bool:
        self.calls.append("topic_exists")
        return topic[1] in self.topics

    def create_topic(self, name: str) -> tuple[str, str]:
        self.calls.append("create_topic")
        self.topics.add(name)
        return ("topic", name)

    def subscription(self, name: str) -> tuple[str, str]:
        self.calls.append("subscription")
        return ("subscription", name)

    def subscription_exists(self, subscription: tuple[str, str]) -> bool:
        self.calls.append("subscription_exists")
        return subscription[1] in self.subscriptions

    def create_subscription(
        self, name: str, config: PushSubscriptionConfig
    ) -> tuple[str, str]:
        self.calls.append("create_subscription")
        self.subscriptions[name] = config
        return ("subscription", name)

    def count(self, call: str) -> int:
        return self.calls.count(call)


class RecordingHandler:
    """Subscriber object that stores received messages."""

    def __init__(self, fail: bool = False) -> None:
        self.fail = fail
        self.messages: list[Message] = []

    def handle(self, message: Message) -> None:
        self.messages.append(message)
        if self.fail:
            raise RuntimeError("handler blew up")


def encode_envelope(data: str, **message: Any) -> bytes:
    """Build a push request body carrying base64-encoded *data*."""
    payload = {"data": base64.b64encode(data.encode()).decode(), **message}
    return json.dumps({"message": payload}).encode()


@pytest.fixture
def backend() -> FakeBackend:
    return FakeBackend()


@pytest.fixture
def handler() -> RecordingHandler:
    return RecordingHandler()


@pytest.fixture
def subscription(handler: RecordingHandler) -> Subscription:
    return Subscription(topic="test", name="testing", handler=handler)
