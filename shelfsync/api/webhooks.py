"""
Webhook endpoints - receive inventory level updates from Shopify.

Processing order:
1. Read the raw body (never re-serialized)
2. Signature validation (X-Shopify-Hmac-Sha256)
3. Payload decoding
4. Append to the inventory log
"""
import logging

from fastapi import APIRouter, Depends, Request
from fastapi.responses import PlainTextResponse

from shelfsync.api.deps import get_app_settings, get_inventory_log
from shelfsync.config import Settings
from shelfsync.schemas.inventory import decode_inventory_payload
from shelfsync.services.inventory_log import InventoryLog
from shelfsync.utils.logging import reset_shopify_delivery, set_shopify_delivery
from shelfsync.utils.webhook_signatures import validate_shopify_request

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/webhook", tags=["webhooks"])


@router.post("/inventory", response_class=PlainTextResponse)
async def inventory_webhook(
    request: Request,
    settings: Settings = Depends(get_app_settings),
    inventory_log: InventoryLog = Depends(get_inventory_log),
):
    """Shopify inventory_levels/update webhook."""
    token = set_shopify_delivery(request.headers)
    try:
        return await _handle_inventory_delivery(request, settings, inventory_log)
    finally:
        reset_shopify_delivery(token)


async def _handle_inventory_delivery(
    request: Request,
    settings: Settings,
    inventory_log: InventoryLog,
) -> PlainTextResponse:
    body = await request.body()

    if not validate_shopify_request(request, body, settings.shopify_api_secret):
        client_ip = request.client.host if request.client else "unknown"
        logger.warning(
            "Invalid Shopify webhook signature: ip=%s", client_ip,
            extra={"provider": "shopify"},
        )
        return PlainTextResponse("Unauthorized", status_code=401)

    decoded = decode_inventory_payload(body)
    if not decoded.ok:
        logger.warning(
            "Rejected verified Shopify webhook: %s", decoded.error,
            extra={"provider": "shopify"},
        )
        return PlainTextResponse("Bad Request", status_code=400)

    entry = inventory_log.record(decoded.payload)
    logger.info(
        "Inventory update recorded: available=%s", entry.available,
        extra={"provider": "shopify", "inventory_item_id": entry.inventory_item_id},
    )
    return PlainTextResponse("Received", status_code=200)
