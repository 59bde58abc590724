"""ResourceProvisioner — ensures a subscription's topic and push subscription exist."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any, TypeVar

import structlog

from pusu.backends.base import BackendClient, PushSubscriptionConfig
from pusu.errors import BackendError
from pusu.naming import ACK_DEADLINE_SECONDS, push_endpoint
from pusu.subscription import Subscription

logger = structlog.get_logger()

T = TypeVar("T")


class ResourceProvisioner:
    """Reconciles one subscription against the backend, idempotently.

    Existence is checked before every create so ``ensure`` is safe to call on
    each process start.  An existing subscription is never reconfigured: a
    changed ``host`` does not update the push endpoint of a subscription that
    was created earlier.

    Steps run strictly in order (topic, then subscription) and stop at the
    first failure.  Resources created before a failure are left in place.
    """

    def __init__(
        self,
        client: BackendClient,
        host: str,
        *,
        ack_deadline_seconds: int = ACK_DEADLINE_SECONDS,
    ) -> None:
        self._client = client
        self._host = host
        self._ack_deadline_seconds = ack_deadline_seconds

    @property
    def host(self) -> str:
        return self._host

    def endpoint_for(self, subscription: Subscription) -> str:
        return push_endpoint(self._host, subscription.topic, subscription.name)

    def ensure(self, subscription: Subscription) -> None:
        subscription.validate()

        def call(step: str, fn: Callable[..., T], *args: Any) -> T:
            try:
                return fn(*args)
            except Exception as exc:
                logger.error(
                    "provisioner.backend_error",
                    step=step,
                    topic=subscription.topic,
                    subscription=subscription.name,
                    error=str(exc),
                )
                raise BackendError(
                    step,
                    topic=subscription.topic,
                    subscription=subscription.name,
                    cause=exc,
                ) from exc

        topic = call("topic", self._client.topic, subscription.topic)
        if call("topic_exists", self._client.topic_exists, topic):
            logger.info("provisioner.topic_exists", topic=subscription.topic)
        else:
            topic = call("create_topic", self._client.create_topic, subscription.topic)
            logger.info("provisioner.topic_created", topic=subscription.topic)

        handle = call("subscription", self._client.subscription, subscription.name)
        if call("subscription_exists", self._client.subscription_exists, handle):
            # Push endpoint and ack deadline of an existing subscription are
            # left untouched.
            logger.info(
                "provisioner.subscription_exists", subscription=subscription.name
            )
            return

        config = PushSubscriptionConfig(
            topic=topic,
            ack_deadline_seconds=self._ack_deadline_seconds,
            push_endpoint=self.endpoint_for(subscription),
        )
        call(
            "create_subscription",
            self._client.create_subscription,
            subscription.name,
            config,
        )
        logger.info(
            "provisioner.subscription_created",
            topic=subscription.topic,
            subscription=subscription.name,
            endpoint=config.push_endpoint,
            ack_deadline_seconds=config.ack_deadline_seconds,
        )
