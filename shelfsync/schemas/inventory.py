"""
Inventory webhook schemas - raw Shopify payload and the in-memory log entry.
"""
import json
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError


class InventoryLevelPayload(BaseModel):
    """Shopify inventory_levels/update webhook body."""
    model_config = ConfigDict(extra="ignore")

    inventory_item_id: int
    available: Optional[int] = None
    location_id: Optional[int] = None
    updated_at: Optional[str] = None  # Shopify's own timestamp, informational only


class InventoryLogEntry(BaseModel):
    inventory_item_id: int
    available: Optional[int] = None
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


@dataclass(frozen=True)
class PayloadDecodeResult:
    payload: Optional[InventoryLevelPayload] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.payload is not None


def decode_inventory_payload(body: bytes) -> PayloadDecodeResult:
    """
    Parse a verified webhook body into an InventoryLevelPayload.
    Invalid JSON or a body missing inventory_item_id yields an error result.
    """
    try:
        data = json.loads(body)
    except (UnicodeDecodeError, ValueError) as e:
        return PayloadDecodeResult(error=f"invalid JSON: {e}")

    if not isinstance(data, dict):
        return PayloadDecodeResult(error="payload is not a JSON object")

    try:
        return PayloadDecodeResult(payload=InventoryLevelPayload.model_validate(data))
    except ValidationError as e:
        return PayloadDecodeResult(error=f"invalid inventory payload: {e.error_count()} error(s)")
