"""WebhookDispatcher — turns Pub/Sub push requests into handler calls.

The response status is the only signal the backend receives: 200 acknowledges
the message, any 5xx makes the backend redeliver it later under its own retry
policy.  The dispatcher never retries by itself.
"""

from __future__ import annotations

import asyncio
import base64
import binascii
import inspect
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any

import pydantic
import structlog
from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from pusu.errors import DecodeError, HandlerError
from pusu.subscription import Message, Subscription

logger = structlog.get_logger()

ERROR_NOT_FOUND = "not found"
ERROR_ENVELOPE = "fatal error decoding the push envelope"
ERROR_PAYLOAD = "fatal error decoding message payload"
ERROR_EXECUTION = "message execution unsuccessful"


def _scalar_text(value: Any) -> str:
    if isinstance(value, str):
        return value
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    return ""


class PushMessage(BaseModel):
    """The ``message`` object of a push envelope.

    Only ``data`` is required to be well-formed.  Metadata is best-effort:
    values of an unexpected type fall back to empty defaults instead of
    rejecting the delivery.
    """

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    data: str = ""
    message_id: str = Field(
        default="", validation_alias=AliasChoices("messageId", "message_id")
    )
    publish_time: str = Field(
        default="", validation_alias=AliasChoices("publishTime", "publish_time")
    )
    attributes: dict[str, str] = Field(default_factory=dict)

    @field_validator("message_id", "publish_time", mode="before")
    @classmethod
    def _lenient_text(cls, value: Any) -> str:
        return _scalar_text(value)

    @field_validator("attributes", mode="before")
    @classmethod
    def _lenient_attributes(cls, value: Any) -> dict[str, str]:
        if not isinstance(value, dict):
            return {}
        return {
            str(key): _scalar_text(item)
            for key, item in value.items()
            if item is not None
        }


class PushEnvelope(BaseModel):
    """JSON body of a Pub/Sub push request."""

    model_config = ConfigDict(extra="ignore")

    message: PushMessage
    subscription: str = ""

    @field_validator("subscription", mode="before")
    @classmethod
    def _lenient_subscription(cls, value: Any) -> str:
        return _scalar_text(value)


@dataclass(frozen=True)
class PushRequest:
    method: str
    path: str
    body: bytes = b""
    headers: MappingProxyType[str, str] = field(
        default_factory=lambda: MappingProxyType({})
    )


@dataclass(frozen=True)
class PushResponse:
    status: int
    body: str = ""

    @property
    def acknowledged(self) -> bool:
        return self.status == 200


def decode_envelope(body: bytes | str) -> Message:
    """Decode a push request body into a :class:`Message`.

    Raises :class:`DecodeError` with ``reason="envelope"`` when the body is
    not a JSON envelope carrying non-empty ``message.data``, and with
    ``reason="payload"`` when ``data`` is not valid base64.
    """
    try:
        envelope = PushEnvelope.model_validate_json(body)
    except pydantic.ValidationError as exc:
        raise DecodeError("envelope", str(exc)) from exc
    if not envelope.message.data:
        raise DecodeError("envelope", "message.data is empty")

    # Line breaks are allowed inside standard base64; any other stray
    # character is a payload error.
    data = envelope.message.data.replace("\r", "").replace("\n", "")
    try:
        raw = base64.b64decode(data, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise DecodeError("payload", str(exc)) from exc

    return Message(
        data=raw.decode("utf-8", errors="replace"),
        raw=raw,
        message_id=envelope.message.message_id,
        publish_time=envelope.message.publish_time,
        attributes=MappingProxyType(dict(envelope.message.attributes)),
        subscription=envelope.subscription,
    )


def _is_async_handler(handler: Any) -> bool:
    if inspect.iscoroutinefunction(handler):
        return True
    method = getattr(handler, "handle", None) or getattr(handler, "__call__", None)
    return inspect.iscoroutinefunction(method)


class WebhookDispatcher:
    """Serves the push endpoint of exactly one subscription.

    The subscription is bound once, at construction, and only read afterwards,
    so ``handle`` may run from any number of concurrent request tasks.
    """

    def __init__(self, subscription: Subscription) -> None:
        subscription.validate(require_handler=True)
        self._subscription = subscription
        self._path = subscription.path
        self._async_handler = _is_async_handler(subscription.handler)

    @property
    def subscription(self) -> Subscription:
        return self._subscription

    @property
    def registration_path(self) -> str:
        return self._path

    async def invoke(self, message: Message) -> None:
        """Run the bound handler, raising :class:`HandlerError` on failure."""
        name = self._subscription.name
        try:
            if self._async_handler:
                result = await self._subscription.call_handler(message)
            else:
                # Blocking handlers run off the event loop.
                result = await asyncio.to_thread(
                    self._subscription.call_handler, message
                )
                if inspect.isawaitable(result):
                    result = await result
        except Exception as exc:
            raise HandlerError(name, exc) from exc
        if result is False:
            raise HandlerError(name)

    async def handle(self, request: PushRequest) -> PushResponse:
        if request.path != self._path or request.method != "POST":
            logger.warning(
                "dispatcher.rejected",
                subscription=self._subscription.name,
                method=request.method,
                path=request.path,
            )
            return PushResponse(404, ERROR_NOT_FOUND)

        try:
            message = decode_envelope(request.body)
        except DecodeError as exc:
            logger.error(
                "dispatcher.decode_failed",
                subscription=self._subscription.name,
                reason=exc.reason,
                detail=exc.detail,
            )
            body = ERROR_PAYLOAD if exc.reason == "payload" else ERROR_ENVELOPE
            return PushResponse(500, body)

        try:
            await self.invoke(message)
        except HandlerError as exc:
            logger.warning(
                "dispatcher.handler_failed",
                subscription=self._subscription.name,
                message_id=message.message_id,
                error=str(exc.cause) if exc.cause is not None else "returned False",
            )
            return PushResponse(500, ERROR_EXECUTION)

        logger.debug(
            "dispatcher.acknowledged",
            subscription=self._subscription.name,
            message_id=message.message_id,
        )
        return PushResponse(200)
