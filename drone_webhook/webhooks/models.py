"""Webhook payload and notifier configuration models."""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, ValidationError

from drone_webhook.core.config import Settings
from drone_webhook.core.exceptions import ConfigurationException, InvalidPayloadException


class WebhookEvent(str, Enum):
    """Webhook event types."""

    USER = "user"
    REPO = "repo"
    BUILD = "build"


class WebhookAction(str, Enum):
    """Webhook event actions."""

    CREATED = "created"
    UPDATED = "updated"
    DELETED = "deleted"
    ENABLED = "enabled"
    DISABLED = "disabled"


class System(BaseModel):
    """Descriptor of the deployment sending the webhook."""

    model_config = ConfigDict(frozen=True, extra="allow")

    proto: Optional[str] = None
    host: Optional[str] = None
    link: Optional[str] = None
    version: Optional[str] = None

    @classmethod
    def from_settings(cls, settings: Settings) -> Optional["System"]:
        """Build the descriptor from settings, or None when no host is set."""
        if not settings.server_host:
            return None
        return cls(
            proto=settings.server_proto,
            host=settings.server_host,
            link=settings.system_link,
            version=settings.server_version,
        )


class WebhookData(BaseModel):
    """Event payload delivered to webhook endpoints.

    ``event`` classifies the payload and is echoed in the ``X-Drone-Event``
    header. Event-specific fields beyond the declared ones are kept and
    serialized as given.
    """

    model_config = ConfigDict(extra="allow", use_enum_values=True)

    event: str
    action: Optional[str] = None
    user: Optional[Any] = None
    repo: Optional[Any] = None
    build: Optional[Any] = None
    system: Optional[System] = None


@dataclass(frozen=True)
class NotifierConfig:
    """Immutable delivery configuration shared by every send."""

    endpoints: tuple[str, ...] = ()
    secret: str = ""
    system: Optional[System] = None
    timeout: float = 60.0

    def __post_init__(self) -> None:
        if isinstance(self.endpoints, str):
            raise ConfigurationException(
                "endpoints must be a sequence of URLs",
                details={"endpoints": self.endpoints},
            )
        object.__setattr__(self, "endpoints", tuple(self.endpoints))
        if self.timeout <= 0:
            raise ConfigurationException(
                "timeout must be positive",
                details={"timeout": self.timeout},
            )

    @classmethod
    def from_settings(cls, settings: Settings) -> "NotifierConfig":
        """Build configuration from application settings."""
        return cls(
            endpoints=tuple(settings.webhook_endpoints),
            secret=settings.webhook_secret,
            system=System.from_settings(settings),
            timeout=settings.webhook_timeout,
        )


def render_payload(data: WebhookData, system: Optional[System] = None) -> bytes:
    """Serialize the payload, attaching ``system`` only if the event has none.

    Args:
        data: Event payload
        system: Configured deployment descriptor

    Returns:
        Compact JSON body with unset fields omitted
    """
    if data.system is None and system is not None:
        data = data.model_copy(update={"system": system})
    return data.model_dump_json(exclude_none=True).encode("utf-8")


def as_webhook_data(event: WebhookData | dict[str, Any]) -> WebhookData:
    """Coerce a mapping into a WebhookData payload."""
    if isinstance(event, WebhookData):
        return event
    try:
        return WebhookData.model_validate(event)
    except ValidationError as e:
        raise InvalidPayloadException(
            "Invalid webhook payload",
            details={"errors": e.errors(include_url=False)},
        ) from e
