"""
Order notification formatting.

Builds the payloads sent to notification sinks when an order is paid:
a Discord embed (webhook JSON) and an HTML message for Telegram admins.
"""

from datetime import datetime

import config
from models.order import Order, utcnow
from utils.html_escape import safe_html

EMBED_COLOR = 5614830


def format_shipping_address(order: Order) -> str:
    customer = order.customer
    lines = [
        customer.street,
        f"Apt/Unit: {customer.apartment}" if customer.apartment else None,
        f"{customer.city}, {customer.state} {customer.postal}",
        customer.country,
    ]
    return "\n".join(line for line in lines if line)


def build_order_completed_payload(order: Order, client_ip: str | None = None,
                                  sent_at: datetime | None = None) -> dict:
    """
    Discord webhook payload for a verified order.

    Args:
        order: Verified order
        client_ip: Address the payment callback came from (informational)
        sent_at: Timestamp for the embed, defaults to now

    Returns:
        JSON-serializable dict with one embed and optional delivery instructions
    """
    customer = order.customer
    return {
        "embeds": [{
            "title": f"🎉 New Order Completed - {order.id}",
            "color": EMBED_COLOR,
            "fields": [
                {"name": "Customer", "value": customer.full_name, "inline": True},
                {
                    "name": "Contact",
                    "value": f"📧 {customer.email}\n📱 {customer.phone or 'Not provided'}",
                    "inline": True
                },
                {"name": "Address", "value": format_shipping_address(order), "inline": False},
                {"name": "Total Amount", "value": f"${order.amount}", "inline": True},
                {"name": "Transaction ID", "value": order.transaction_id or "N/A", "inline": True},
                {"name": "IP Address", "value": client_ip or "unknown", "inline": True},
            ],
            "footer": {"text": config.STORE_NAME},
            "timestamp": (sent_at or utcnow()).isoformat(),
        }],
        "content": (
            f"**Delivery Instructions:**\n{customer.delivery_instructions}"
            if customer.delivery_instructions else ""
        ),
    }


def build_telegram_message(payload: dict) -> str:
    """
    Render the Discord payload as a Telegram HTML message.

    Every value originates from storefront input, so all of it is escaped.
    """
    embed = payload["embeds"][0]
    lines = [f"<b>{safe_html(embed['title'])}</b>", ""]
    for field in embed["fields"]:
        lines.append(f"<b>{safe_html(field['name'])}:</b>")
        lines.append(safe_html(field["value"]))
    if payload.get("content"):
        lines.append("")
        lines.append(safe_html(payload["content"].replace("**", "")))
    return "\n".join(lines)
