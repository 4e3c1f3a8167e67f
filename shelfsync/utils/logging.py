"""
Structured JSON logging for shelfsync.

Each line is one JSON object: timestamp, level, correlation_id, logger, message.
While a Shopify delivery is being handled, its topic, webhook id and shop
domain (from the X-Shopify-* headers) ride along on every line logged in
that request, so one delivery can be traced end to end.
"""
import json
import logging
import uuid
from contextvars import ContextVar, Token
from datetime import datetime, timezone
from typing import Optional

correlation_id_ctx: ContextVar[Optional[str]] = ContextVar("correlation_id", default=None)
shopify_delivery_ctx: ContextVar[Optional[dict]] = ContextVar("shopify_delivery", default=None)

# Extra record attributes copied into the JSON line when set
EXTRA_FIELDS = ("topic", "address", "inventory_item_id", "webhook_id", "provider", "status_code")


def get_correlation_id() -> Optional[str]:
    return correlation_id_ctx.get()


def set_correlation_id(cid: str) -> None:
    correlation_id_ctx.set(cid)


def generate_correlation_id() -> str:
    """Generate a new correlation ID (UUID4 hex, 32 chars)."""
    return uuid.uuid4().hex


def set_shopify_delivery(headers) -> Token:
    """Bind the X-Shopify-* delivery headers of the current request to the log context."""
    delivery = {
        "shopify_topic": headers.get("X-Shopify-Topic"),
        "shopify_webhook_id": headers.get("X-Shopify-Webhook-Id"),
        "shopify_shop": headers.get("X-Shopify-Shop-Domain"),
        "shopify_triggered_at": headers.get("X-Shopify-Triggered-At"),
    }
    return shopify_delivery_ctx.set({k: v for k, v in delivery.items() if v} or None)


def reset_shopify_delivery(token: Token) -> None:
    shopify_delivery_ctx.reset(token)


def get_shopify_delivery() -> Optional[dict]:
    return shopify_delivery_ctx.get()


class StructuredJsonFormatter(logging.Formatter):
    """
    Formats log records as single-line JSON objects.

    Output format:
    {"timestamp": "...", "level": "INFO", "correlation_id": "...", "logger": "...", "message": "...", ...}
    """

    def format(self, record: logging.LogRecord) -> str:
        log_entry = {
            "timestamp": datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%S.%fZ"),
            "level": record.levelname,
            "correlation_id": get_correlation_id(),
            "logger": record.name,
            "message": record.getMessage(),
        }

        if record.exc_info and record.exc_info[0] is not None:
            log_entry["exception"] = self.formatException(record.exc_info)

        delivery = get_shopify_delivery()
        if delivery:
            log_entry.update(delivery)

        for key in EXTRA_FIELDS:
            val = getattr(record, key, None)
            if val is not None:
                log_entry[key] = val

        return json.dumps(log_entry, default=str)


def configure_structured_logging(log_level: str = "INFO") -> None:
    """
    Replace default logging with structured JSON logging.
    Call once at application startup before any log calls.
    """
    level = getattr(logging, log_level.upper(), logging.INFO)

    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    stream_handler = logging.StreamHandler()
    stream_handler.setFormatter(StructuredJsonFormatter())
    root_logger.addHandler(stream_handler)

    # httpx logs full request URLs at INFO
    for noisy in ("uvicorn.access", "httpcore", "httpx"):
        logging.getLogger(noisy).setLevel(logging.WARNING)
