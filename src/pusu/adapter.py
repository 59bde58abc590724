"""Adapter facade — prepare a subscription, then serve it."""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable

import structlog

from pusu.backends.base import BackendClient
from pusu.config.models import AdapterConfig
from pusu.errors import ValidationError
from pusu.provisioner import ResourceProvisioner
from pusu.runner import Runner, ServerRunner
from pusu.server import PushServer
from pusu.subscription import Subscription

logger = structlog.get_logger()


@runtime_checkable
class Registrar(Protocol):
    """Makes a subscription's push endpoint reachable locally."""

    def register(self, subscription: Subscription) -> Any:
        """Bind the subscription's webhook; raise if it cannot be bound."""
        ...


class Adapter:
    """Composes provisioning, webhook registration and serving.

    ``prepare`` registers the webhook before reconciling backend resources so
    the endpoint is reachable by the time the push subscription goes live.
    The first failure aborts and is raised unchanged.
    """

    def __init__(
        self,
        provisioner: ResourceProvisioner,
        registrar: Registrar,
        runner: Runner,
    ) -> None:
        self._provisioner = provisioner
        self._registrar = registrar
        self._runner = runner

    @property
    def provisioner(self) -> ResourceProvisioner:
        return self._provisioner

    @property
    def registrar(self) -> Registrar:
        return self._registrar

    @property
    def runner(self) -> Runner:
        return self._runner

    def prepare(self, subscription: Subscription) -> None:
        subscription.validate(require_handler=True)
        self._registrar.register(subscription)
        self._provisioner.ensure(subscription)
        logger.info(
            "adapter.prepared",
            topic=subscription.topic,
            subscription=subscription.name,
        )

    def run(self, subscription: Subscription) -> None:
        self._runner.run(subscription)


def create_adapter(
    config: AdapterConfig, *, client: BackendClient | None = None
) -> Adapter:
    """Build an :class:`Adapter` backed by Google Cloud Pub/Sub.

    ``config.host`` is the public base URL the backend pushes to, e.g.
    ``https://subscriber-dot-my-project.appspot.com``.
    """
    if not config.project_id:
        msg = "project_id must not be empty"
        raise ValidationError(msg)
    if not config.host:
        msg = "host for subscriber http handlers must not be empty"
        raise ValidationError(msg)

    if client is None:
        from pusu.backends.google import GooglePubSubClient

        client = GooglePubSubClient(config.project_id)

    provisioner = ResourceProvisioner(
        client, config.host, ack_deadline_seconds=config.ack_deadline_seconds
    )
    server = PushServer(config.port, bind_host=config.bind_host)
    return Adapter(provisioner, server, ServerRunner(server))
