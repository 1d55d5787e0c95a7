"""Delivery adapters: where a fired notification actually goes."""

import logging
from typing import Any

import httpx

from umbrella.errors import SchedulingFailure

logger = logging.getLogger(__name__)


class LogDelivery:
    """Writes notifications to the log. The default channel."""

    name = "log"

    def deliver(self, title: str, body: str, payload: dict[str, Any] | None = None) -> None:
        logger.info("NOTIFY: %s | %s", title, body)


class WebhookDelivery:
    """POSTs notifications as JSON to a configured URL."""

    name = "webhook"

    def __init__(self, url: str, timeout: float = 10.0):
        self.url = url
        self.timeout = timeout

    def deliver(self, title: str, body: str, payload: dict[str, Any] | None = None) -> None:
        data = {"title": title, "body": body, "payload": payload or {}}
        try:
            resp = httpx.post(self.url, json=data, timeout=self.timeout)
        except httpx.RequestError as e:
            logger.error("Webhook delivery failed: %s", e)
            raise SchedulingFailure(f"Webhook request failed: {e}") from e
        if resp.status_code >= 400:
            logger.error("Webhook %d: %s", resp.status_code, resp.text)
            raise SchedulingFailure(f"Webhook returned HTTP {resp.status_code}")
        logger.info("Webhook delivered: %s", title)
