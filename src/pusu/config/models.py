"""Pydantic configuration models for the adapter."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field, field_validator

from pusu.naming import ACK_DEADLINE_SECONDS

LogLevel = Literal["debug", "info", "warning", "error", "critical"]


class AdapterConfig(BaseModel):
    """Settings for provisioning and serving push subscriptions.

    ``project_id`` and ``host`` may be empty here so a partially filled config
    still loads; :func:`pusu.adapter.create_adapter` rejects them when empty.
    """

    project_id: str = ""
    # Public base URL the backend pushes to (scheme + host, no path).
    host: str = ""
    port: int = Field(default=8080, ge=0, le=65535)
    bind_host: str = "0.0.0.0"  # noqa: S104
    # Pub/Sub accepts 10..600; the default is the fixed contract value.
    ack_deadline_seconds: int = Field(default=ACK_DEADLINE_SECONDS, ge=10, le=600)
    log_level: LogLevel = "info"
    json_logs: bool = False

    @field_validator("host")
    @classmethod
    def validate_host(cls, v: str) -> str:
        """Require an absolute http(s) URL and drop any trailing slash."""
        if v and not v.startswith(("http://", "https://")):
            msg = f"host '{v}' must start with http:// or https://"
            raise ValueError(msg)
        return v.rstrip("/")

    @field_validator("log_level", mode="before")
    @classmethod
    def normalize_log_level(cls, v: object) -> object:
        return v.lower() if isinstance(v, str) else v
