"""Error taxonomy for provisioning and webhook delivery."""

from __future__ import annotations


class PusuError(Exception):
    """Base class for every error raised by pusu."""


class ProvisionError(PusuError):
    """Raised when a subscription cannot be prepared."""


class ValidationError(ProvisionError, ValueError):
    """Invalid input detected before any backend call is made."""


class BackendError(ProvisionError):
    """A backend call failed during provisioning.

    ``step`` names the failing backend operation (``topic_exists``,
    ``create_topic``, ``subscription_exists`` or ``create_subscription``).
    The original exception is kept as ``cause`` and as ``__cause__``.
    """

    def __init__(
        self,
        step: str,
        *,
        topic: str,
        subscription: str,
        cause: BaseException,
    ) -> None:
        self.step = step
        self.topic = topic
        self.subscription = subscription
        self.cause = cause
        super().__init__(
            f"Backend call '{step}' failed for topic '{topic}' "
            f"(subscription '{subscription}'): {cause}"
        )


class DecodeError(PusuError):
    """A pushed request could not be decoded into a message.

    ``reason`` is ``"envelope"`` for a malformed JSON envelope and
    ``"payload"`` for undecodable base64 message data.
    """

    def __init__(self, reason: str, detail: str = "") -> None:
        self.reason = reason
        self.detail = detail
        msg = f"Failed to decode push {reason}"
        if detail:
            msg += f": {detail}"
        super().__init__(msg)


class HandlerError(PusuError):
    """The subscriber handler reported a failure."""

    def __init__(self, subscription: str, cause: BaseException | None = None) -> None:
        self.subscription = subscription
        self.cause = cause
        msg = f"Handler for subscription '{subscription}' failed"
        if cause is not None:
            msg += f": {cause}"
        super().__init__(msg)
