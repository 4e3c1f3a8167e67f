"""
Shopify Admin REST integration - webhook subscriptions.

Auth: X-Shopify-Access-Token header (custom app admin token).
Docs: https://shopify.dev/docs/api/admin-rest/latest/resources/webhook
All calls have a timeout; errors propagate as httpx exceptions.
"""
import logging
from typing import Optional

import httpx

logger = logging.getLogger(__name__)

DEFAULT_API_VERSION = "2024-04"
TIMEOUT = 10.0
PAGE_LIMIT = 250  # Shopify maximum


class ShopifyAdminClient:
    """Shopify Admin API client for the webhooks resource."""

    def __init__(
        self,
        store_domain: str,
        access_token: str,
        api_version: str = DEFAULT_API_VERSION,
        timeout: float = TIMEOUT,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.store_domain = store_domain
        self.api_version = api_version
        self.timeout = timeout
        self._transport = transport
        self._headers = {
            "X-Shopify-Access-Token": access_token,
            "Content-Type": "application/json",
            "Accept": "application/json",
        }

    @property
    def webhooks_url(self) -> str:
        return f"https://{self.store_domain}/admin/api/{self.api_version}/webhooks.json"

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            timeout=self.timeout,
            headers=self._headers,
            transport=self._transport,
        )

    async def list_webhooks(self) -> list[dict]:
        """
        Fetch every webhook subscription on the store.
        Follows Link rel="next" cursors until the last page.
        """
        webhooks: list[dict] = []
        url: Optional[str] = self.webhooks_url
        params: Optional[dict] = {"limit": PAGE_LIMIT}

        async with self._client() as client:
            while url:
                response = await client.get(url, params=params)
                response.raise_for_status()
                page = _json_object(response).get("webhooks")
                if not isinstance(page, list):
                    raise ValueError("Shopify webhooks response missing 'webhooks' list")
                if not all(isinstance(item, dict) for item in page):
                    raise ValueError("Shopify webhooks list contains a non-object entry")
                webhooks.extend(page)

                # The next-page URL already carries limit and page_info
                url = response.links.get("next", {}).get("url")
                params = None

        logger.debug("Fetched %d Shopify webhook(s)", len(webhooks))
        return webhooks

    async def create_webhook(self, topic: str, address: str, format: str = "json") -> dict:
        """Create a webhook subscription. Returns the created webhook object."""
        payload = {"webhook": {"topic": topic, "address": address, "format": format}}
        async with self._client() as client:
            response = await client.post(self.webhooks_url, json=payload)
            response.raise_for_status()
            webhook = _json_object(response).get("webhook")
            if not isinstance(webhook, dict):
                raise ValueError("Shopify create response missing 'webhook' object")
            return webhook


def _json_object(response: httpx.Response) -> dict:
    """Decode a JSON object body; anything else is a ValueError."""
    data = response.json()
    if not isinstance(data, dict):
        raise ValueError(f"expected JSON object from Shopify, got {type(data).__name__}")
    return data
