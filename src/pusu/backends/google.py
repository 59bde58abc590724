"""GooglePubSubClient — BackendClient implementation for Google Cloud Pub/Sub."""

from __future__ import annotations

from typing import Any

import structlog

from pusu.backends.base import PushSubscriptionConfig
from pusu.naming import pubsub_subscription_name, pubsub_topic_name

logger = structlog.get_logger()


class GooglePubSubClient:
    """Wraps the Pub/Sub publisher and subscriber admin APIs.

    Topic and subscription handles are the fully-qualified resource paths
    (``projects/{project}/topics/{name}``).  The SDK clients are created on
    first use unless passed in, so constructing the wrapper never touches
    credentials.
    """

    def __init__(
        self,
        project_id: str,
        *,
        publisher: Any | None = None,
        subscriber: Any | None = None,
    ) -> None:
        if not project_id:
            msg = "project_id must not be empty"
            raise ValueError(msg)
        self._project_id = project_id
        self._publisher = publisher
        self._subscriber = subscriber

    @property
    def project_id(self) -> str:
        return self._project_id

    @property
    def publisher(self) -> Any:
        if self._publisher is None:
            from google.cloud import pubsub_v1

            self._publisher = pubsub_v1.PublisherClient()
        return self._publisher

    @property
    def subscriber(self) -> Any:
        if self._subscriber is None:
            from google.cloud import pubsub_v1

            self._subscriber = pubsub_v1.SubscriberClient()
        return self._subscriber

    def topic(self, name: str) -> str:
        return pubsub_topic_name(self._project_id, name)

    def topic_exists(self, topic: str) -> bool:
        from google.api_core.exceptions import NotFound

        try:
            self.publisher.get_topic(request={"topic": topic})
        except NotFound:
            return False
        return True

    def create_topic(self, name: str) -> str:
        full_topic = self.topic(name)
        self.publisher.create_topic(request={"name": full_topic})
        logger.debug("pubsub.create_topic", topic=full_topic)
        return full_topic

    def subscription(self, name: str) -> str:
        return pubsub_subscription_name(self._project_id, name)

    def subscription_exists(self, subscription: str) -> bool:
        from google.api_core.exceptions import NotFound

        try:
            self.subscriber.get_subscription(request={"subscription": subscription})
        except NotFound:
            return False
        return True

    def create_subscription(self, name: str, config: PushSubscriptionConfig) -> str:
        sub_name = self.subscription(name)
        request: dict[str, Any] = {
            "name": sub_name,
            "topic": config.topic,
            "ack_deadline_seconds": config.ack_deadline_seconds,
            "push_config": {"push_endpoint": config.push_endpoint},
        }
        self.subscriber.create_subscription(request=request)
        logger.debug(
            "pubsub.create_subscription",
            subscription=sub_name,
            endpoint=config.push_endpoint,
        )
        return sub_name
