"""Custom exceptions for webhook delivery."""

from typing import Optional


class DroneWebhookException(Exception):
    """Base exception for all webhook delivery errors."""

    def __init__(self, message: str, details: dict | None = None) -> None:
        """Initialize exception with message and optional details.

        Args:
            message: Error message
            details: Additional error details
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}


class ConfigurationException(DroneWebhookException):
    """Configuration error."""

    pass


class SignatureException(DroneWebhookException):
    """Request signing or signature verification failed."""

    pass


class DeliveryException(DroneWebhookException):
    """Delivery to a single endpoint failed."""

    def __init__(
        self,
        message: str,
        endpoint: Optional[str] = None,
        details: dict | None = None,
    ) -> None:
        """Initialize delivery exception.

        Args:
            message: Error message
            endpoint: Endpoint the delivery was addressed to
            details: Additional error details
        """
        super().__init__(message, details)
        self.endpoint = endpoint


class InvalidEndpointException(DeliveryException):
    """Endpoint URL is malformed and no request could be built."""

    pass


class DeliveryTimeoutException(DeliveryException):
    """Delivery attempt did not complete before its deadline."""

    pass


class InvalidPayloadException(DroneWebhookException):
    """Event payload could not be converted to webhook data."""

    pass
