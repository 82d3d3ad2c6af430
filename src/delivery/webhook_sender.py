# src/delivery/webhook_sender.py

"""Posts comparison payloads to an n8n-style webhook."""

import logging
from dataclasses import dataclass
from typing import Any

from curl_cffi import requests as curl_requests

from src.config.settings import Settings

logger = logging.getLogger("gold_watch.delivery")


@dataclass
class DeliveryResult:
    """Outcome of a single webhook POST."""

    success: bool
    status_code: int | None = None
    error: str = ""
    reason: str = ""


class WebhookSender:
    """Sends JSON payloads; never raises on transport errors."""

    def __init__(self, url: str | None = None) -> None:
        self.settings = Settings()
        self.url = self.settings.WEBHOOK_URL if url is None else url

    def send(self, payload: dict[str, Any]) -> DeliveryResult:
        """POST *payload* and report what happened."""
        if not self.url:
            logger.warning(
                "No webhook URL configured, skipping delivery"
            )
            return DeliveryResult(
                success=False, reason="No webhook URL configured"
            )

        logger.info("Posting payload to %s", self.url)
        session = curl_requests.Session()
        try:
            resp = session.post(
                self.url,
                json=payload,
                headers={
                    "Content-Type": "application/json",
                    "User-Agent": self.settings.WEBHOOK_USER_AGENT,
                },
                timeout=self.settings.WEBHOOK_TIMEOUT,
            )
        except Exception as exc:
            logger.error(
                "Webhook request failed: %s", exc, exc_info=True
            )
            return DeliveryResult(success=False, error=str(exc))
        finally:
            session.close()

        if 200 <= resp.status_code < 300:
            logger.info("Webhook accepted (HTTP %d)", resp.status_code)
            return DeliveryResult(
                success=True, status_code=resp.status_code
            )

        logger.warning("Webhook rejected (HTTP %d)", resp.status_code)
        return DeliveryResult(
            success=False,
            status_code=resp.status_code,
            error=f"HTTP {resp.status_code}",
        )
