"""Webhook path, push endpoint and Pub/Sub resource naming conventions."""

from __future__ import annotations

ACK_DEADLINE_SECONDS = 10

_HANDLER_PATH = "/_handlers/topics/{topic}/subscribers/{name}"


def registration_path(topic: str, name: str) -> str:
    """Build the URL path a subscription's webhook is served under."""
    return _HANDLER_PATH.format(topic=topic, name=name)


def push_endpoint(host: str, topic: str, name: str) -> str:
    """Build the absolute push endpoint the backend delivers messages to.

    A trailing slash on *host* is dropped so ``https://svc.example.com/`` and
    ``https://svc.example.com`` yield the same endpoint.
    """
    return f"{host.rstrip('/')}{registration_path(topic, name)}"


def pubsub_topic_name(project_id: str, topic: str) -> str:
    """Build a fully-qualified Pub/Sub topic name."""
    return f"projects/{project_id}/topics/{topic}"


def pubsub_subscription_name(project_id: str, name: str) -> str:
    """Build a fully-qualified Pub/Sub subscription name."""
    return f"projects/{project_id}/subscriptions/{name}"

