"""Backend clients that provisioning runs against."""

from pusu.backends.base import BackendClient, PushSubscriptionConfig

__all__ = ["BackendClient", "PushSubscriptionConfig"]
