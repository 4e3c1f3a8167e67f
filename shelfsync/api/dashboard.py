"""
Dashboard - HTML view of the recent inventory updates.
"""
from html import escape

from fastapi import APIRouter, Depends
from fastapi.responses import HTMLResponse

from shelfsync.api.deps import get_inventory_log
from shelfsync.schemas.inventory import InventoryLogEntry
from shelfsync.services.inventory_log import InventoryLog

router = APIRouter(tags=["dashboard"])


def render_inventory_page(entries: list[InventoryLogEntry]) -> str:
    parts = ["<h1>Shopify Inventory Updates</h1>"]
    if not entries:
        parts.append("<p>No updates yet.</p>")
        return "".join(parts)

    parts.append("<ul>")
    for index, entry in enumerate(entries, start=1):
        available = "n/a" if entry.available is None else str(entry.available)
        parts.append(
            f"<li><strong>{index}:</strong> "
            f"Inventory Item ID: {escape(str(entry.inventory_item_id))}, "
            f"Available: {escape(available)}, "
            f"Updated At: {escape(entry.updated_at.isoformat())}</li>"
        )
    parts.append("</ul>")
    return "".join(parts)


@router.get("/", response_class=HTMLResponse)
async def inventory_dashboard(inventory_log: InventoryLog = Depends(get_inventory_log)):
    return HTMLResponse(render_inventory_page(inventory_log.entries()))
