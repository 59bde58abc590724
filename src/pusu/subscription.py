"""Subscription, Message and the Subscriber handler capability."""

from __future__ import annotations

import json
from collections.abc import Awaitable
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Protocol, runtime_checkable

from pusu.errors import ValidationError
from pusu.naming import registration_path


@dataclass(frozen=True)
class Message:
    """Immutable decoded payload of one pushed Pub/Sub message.

    ``data`` is the base64-decoded payload as text; ``raw`` keeps the bytes.
    Envelope metadata is carried when the backend supplied it.
    """

    data: str
    raw: bytes = b""
    message_id: str = ""
    publish_time: str = ""
    attributes: MappingProxyType[str, str] = field(
        default_factory=lambda: MappingProxyType({})
    )
    subscription: str = ""

    def json(self) -> Any:
        """Parse the payload as JSON."""
        return json.loads(self.data)


@runtime_checkable
class Subscriber(Protocol):
    """Business logic of a subscription.

    Return normally (or return an awaitable that completes normally) to
    acknowledge the message.  Raise, or return ``False``, to have the backend
    redeliver it later.
    """

    def handle(self, message: Message) -> bool | None | Awaitable[bool | None]: ...


@dataclass(frozen=True)
class Subscription:
    """Immutable (topic, name, handler) triple.

    ``handler`` is either a plain callable taking a :class:`Message` or an
    object satisfying :class:`Subscriber`.
    """

    topic: str
    name: str
    handler: Any = None

    @property
    def path(self) -> str:
        return registration_path(self.topic, self.name)

    def validate(self, *, require_handler: bool = False) -> None:
        """Raise :class:`ValidationError` unless the subscription is usable."""
        if not self.name:
            msg = "Subscription name must not be empty"
            raise ValidationError(msg)
        if not self.topic:
            msg = "Subscription topic must not be empty"
            raise ValidationError(msg)
        if require_handler:
            if self.handler is None:
                msg = f"Subscription '{self.name}' has no handler"
                raise ValidationError(msg)
            if not (callable(self.handler) or isinstance(self.handler, Subscriber)):
                msg = (
                    f"Handler of subscription '{self.name}' must be callable "
                    f"or expose handle(message), got {type(self.handler).__name__}"
                )
                raise ValidationError(msg)

    def call_handler(self, message: Message) -> Any:
        """Invoke the bound handler; may return an awaitable."""
        if isinstance(self.handler, Subscriber):
            return self.handler.handle(message)
        return self.handler(message)
