"""Webhook notification system."""

from drone_webhook.webhooks.models import NotifierConfig, System, WebhookData, WebhookEvent
from drone_webhook.webhooks.notifier import Notifier
from drone_webhook.webhooks.signature import Signer

__all__ = ["Notifier", "NotifierConfig", "Signer", "System", "WebhookData", "WebhookEvent"]
