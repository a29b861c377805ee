"""Signed webhook sender."""

import asyncio
from typing import Any, Optional

import httpx

from drone_webhook.core.config import get_settings
from drone_webhook.core.exceptions import (
    DeliveryException,
    DeliveryTimeoutException,
    InvalidEndpointException,
)
from drone_webhook.core.logging import delivery_logger, get_logger
from drone_webhook.webhooks.models import (
    NotifierConfig,
    WebhookData,
    as_webhook_data,
    render_payload,
)
from drone_webhook.webhooks.signature import Signer, digest_header, http_date

logger = get_logger(__name__)


class Notifier:
    """Delivers JSON encoded events to the configured endpoints."""

    def __init__(
        self,
        config: NotifierConfig,
        client: Optional[httpx.AsyncClient] = None,
        signer: Optional[Signer] = None,
    ) -> None:
        """Initialize notifier.

        Args:
            config: Endpoints, secret and system descriptor
            client: Shared HTTP client (owned by the caller when given)
            signer: Request signer (default hmac-sha256 over date and digest)
        """
        self.config = config
        self.signer = signer or Signer()
        self._client = client
        self._owns_client = client is None

    @classmethod
    def from_settings(cls) -> "Notifier":
        """Create notifier configured from the environment."""
        return cls(NotifierConfig.from_settings(get_settings()))

    async def __aenter__(self) -> "Notifier":
        """Enter async context manager."""
        return self

    async def __aexit__(self, *args: Any) -> None:
        """Exit async context manager."""
        await self.aclose()

    def _ensure_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.config.timeout)
        return self._client

    async def aclose(self) -> None:
        """Close the HTTP client if this notifier created it."""
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    async def send(self, event: WebhookData | dict[str, Any]) -> None:
        """Send the event to every endpoint, in order.

        The body is serialized once and shared by all endpoints. The first
        failing endpoint aborts the fan-out and its error is raised; later
        endpoints are not attempted. Wrap the call in ``asyncio.timeout`` to
        impose an overall deadline.

        Args:
            event: Event payload

        Raises:
            InvalidPayloadException: If a mapping payload is not valid webhook data
            DeliveryException: If delivery to any endpoint fails
        """
        if not self.config.endpoints:
            logger.debug("webhook_send_skipped", reason="no_endpoints")
            return

        data = as_webhook_data(event)
        body = render_payload(data, self.config.system)

        for endpoint in self.config.endpoints:
            await self._deliver(endpoint, data.event, body)

    async def _deliver(self, endpoint: str, event: str, body: bytes) -> None:
        """Sign and POST the body to a single endpoint."""
        client = self._ensure_client()
        request = self._build_request(client, endpoint, event, body)
        self.signer.sign_request(request, self.config.secret)
        log = delivery_logger(logger, endpoint, event)

        try:
            response = await asyncio.wait_for(
                client.send(request, stream=True),
                timeout=self.config.timeout,
            )
        except (asyncio.TimeoutError, httpx.TimeoutException) as e:
            log.warning("webhook_delivery_failed", error="timeout")
            raise DeliveryTimeoutException(
                f"Webhook delivery timed out after {self.config.timeout}s",
                endpoint=endpoint,
            ) from e
        except httpx.HTTPError as e:
            log.warning("webhook_delivery_failed", error=str(e))
            raise DeliveryException(f"Webhook delivery failed: {e}", endpoint=endpoint) from e

        try:
            # Status is recorded, not enforced.
            if not response.is_success:
                log.warning("webhook_non_success_status", status_code=response.status_code)
            else:
                log.info("webhook_delivered", status_code=response.status_code)
        finally:
            await response.aclose()

    @staticmethod
    def _build_request(
        client: httpx.AsyncClient,
        endpoint: str,
        event: str,
        body: bytes,
    ) -> httpx.Request:
        try:
            url = httpx.URL(endpoint)
        except (httpx.InvalidURL, TypeError) as e:
            raise InvalidEndpointException(
                f"Invalid webhook endpoint: {endpoint!r}", endpoint=endpoint
            ) from e
        if url.scheme not in ("http", "https") or not url.host:
            raise InvalidEndpointException(
                f"Invalid webhook endpoint: {endpoint!r}", endpoint=endpoint
            )

        return client.build_request(
            "POST",
            url,
            content=body,
            headers={
                "X-Drone-Event": event,
                "Content-Type": "application/json",
                "Digest": digest_header(body),
                "Date": http_date(),
            },
        )
