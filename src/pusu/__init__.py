"""pusu — provision and serve Google Cloud Pub/Sub push subscriptions."""

from pusu.adapter import Adapter, create_adapter
from pusu.dispatcher import PushRequest, PushResponse, WebhookDispatcher
from pusu.errors import (
    BackendError,
    DecodeError,
    HandlerError,
    ProvisionError,
    PusuError,
    ValidationError,
)
from pusu.provisioner import ResourceProvisioner
from pusu.server import PushServer
from pusu.subscription import Message, Subscriber, Subscription

__all__ = [
    "Adapter",
    "BackendError",
    "DecodeError",
    "HandlerError",
    "Message",
    "ProvisionError",
    "PushRequest",
    "PushResponse",
    "PushServer",
    "PusuError",
    "ResourceProvisioner",
    "Subscriber",
    "Subscription",
    "ValidationError",
    "WebhookDispatcher",
    "create_adapter",
]
