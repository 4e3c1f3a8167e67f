"""
Shopify webhook registration - make sure exactly one subscription exists for
our (topic, address) pair, creating it only when it is missing.

Registration state machine:
  unregistered -> registered

  The remote subscription list is the source of truth. The create call fires only
  from unregistered, so repeated restarts never produce duplicates.

Failures never raise. They come back as a ReconcileResult with status
"failed" so startup continues and /health/ready can report it.
"""
import logging
from dataclasses import dataclass
from typing import Optional

import httpx

from shelfsync.integrations.shopify import ShopifyAdminClient

logger = logging.getLogger(__name__)

STATUS_PENDING = "pending"
STATUS_ALREADY_REGISTERED = "already_registered"
STATUS_CREATED = "created"
STATUS_FAILED = "failed"

REGISTERED_STATES = {STATUS_ALREADY_REGISTERED, STATUS_CREATED}


@dataclass(frozen=True)
class ReconcileResult:
    status: str
    topic: str
    address: str
    webhook_id: Optional[int] = None
    error: Optional[str] = None

    @property
    def registered(self) -> bool:
        return self.status in REGISTERED_STATES

    def as_dict(self) -> dict:
        return {
            "status": self.status,
            "topic": self.topic,
            "address": self.address,
            "webhook_id": self.webhook_id,
            "error": self.error,
        }


def find_subscription(webhooks: list[dict], topic: str, address: str) -> Optional[dict]:
    """First subscription whose address and topic both match exactly."""
    for webhook in webhooks:
        if webhook.get("address") == address and webhook.get("topic") == topic:
            return webhook
    return None


def _describe_http_error(e: httpx.HTTPStatusError) -> str:
    try:
        data = e.response.json()
        detail = data.get("errors", data) if isinstance(data, dict) else data
    except ValueError:
        detail = e.response.text
    return f"HTTP {e.response.status_code}: {detail}"


async def reconcile_webhook(
    client: ShopifyAdminClient,
    topic: str,
    address: str,
) -> ReconcileResult:
    """
    Converge remote state to one subscription for (topic, address).

    Returns: ReconcileResult with status already_registered, created or failed.
    """
    log_extra = {"topic": topic, "address": address, "provider": "shopify"}

    try:
        webhooks = await client.list_webhooks()
        existing = find_subscription(webhooks, topic, address)
        if existing is not None:
            logger.info(
                "Shopify webhook already registered (id=%s)",
                existing.get("id"), extra=log_extra,
            )
            return ReconcileResult(
                status=STATUS_ALREADY_REGISTERED,
                topic=topic,
                address=address,
                webhook_id=existing.get("id"),
            )

        created = await client.create_webhook(topic, address, format="json")
        logger.info(
            "Shopify webhook registered (id=%s)",
            created.get("id"), extra=log_extra,
        )
        return ReconcileResult(
            status=STATUS_CREATED,
            topic=topic,
            address=address,
            webhook_id=created.get("id"),
        )
    except httpx.HTTPStatusError as e:
        error = _describe_http_error(e)
        logger.error(
            "Shopify webhook registration failed: %s", error,
            extra={**log_extra, "status_code": e.response.status_code},
        )
    except httpx.HTTPError as e:
        error = f"{type(e).__name__}: {e}"
        logger.error("Shopify webhook registration failed: %s", error, extra=log_extra)
    except ValueError as e:
        error = f"unexpected response: {e}"
        logger.error("Shopify webhook registration failed: %s", error, extra=log_extra)

    return ReconcileResult(status=STATUS_FAILED, topic=topic, address=address, error=error)
