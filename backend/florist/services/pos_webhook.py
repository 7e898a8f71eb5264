"""
POS webhook delivery.

Posts an order to a POS integration endpoint as JSON. When a secret is set
the body is signed with HMAC-SHA256 and sent as
``X-Webhook-Signature: sha256=<hex>``.

Delivery failures are reported in WebhookResponse, never raised.

Usage:
    client = PosWebhookClient(url, secret=settings.pos_webhook_secret)
    response = await client.send_order(order, markup.as_table(), pos.store_name)
"""

from __future__ import annotations

import hashlib
import hmac
import json
from dataclasses import dataclass
from typing import Any

import httpx

from florist.schemas import OrderRecord
from florist.services.pricing import MarkupTable, retail_unit_price, to_money
from shared.config.constants import PosFormat
from shared.config.logging import get_logger

logger = get_logger(__name__)

HEADER_SIGNATURE = "X-Webhook-Signature"
HEADER_SOURCE = "X-Webhook-Source"


@dataclass(frozen=True)
class WebhookResponse:
    """Outcome of one delivery attempt."""

    success: bool
    invoice_number: str | None = None
    order_id: str | None = None
    message: str | None = None
    error: str | None = None

    @classmethod
    def ok(cls, body: dict[str, Any]) -> "WebhookResponse":
        return cls(
            success=True,
            invoice_number=body.get("invoiceNumber") or body.get("invoice_number"),
            order_id=body.get("orderId") or body.get("order_id"),
            message=body.get("message") or "Order sent successfully",
        )

    @classmethod
    def fail(cls, error: str) -> "WebhookResponse":
        return cls(success=False, error=error)


def sign_payload(payload: bytes, secret: str) -> str:
    return hmac.new(secret.encode(), payload, hashlib.sha256).hexdigest()


def build_order_payload(order: OrderRecord, markup_table: MarkupTable, store_name: str) -> dict[str, Any]:
    """JSON body for one order; item prices use the current markup table."""
    return {
        "orderId": order.id,
        "orderName": order.name,
        "staffName": order.staff_name,
        "staffId": order.staff_id,
        "storeName": store_name,
        "totalAmount": float(order.total_retail),
        "items": [
            {
                "name": item.name,
                "quantity": item.quantity,
                "price": float(to_money(retail_unit_price(item.wholesale_cost, item.category, markup_table))),
                "category": item.category,
            }
            for item in order.line_items
        ],
        "notes": order.notes,
        "timestamp": order.created_at.isoformat(),
        "source": PosFormat.WEBHOOK_SOURCE,
    }


class PosWebhookClient:
    """Sends orders to one webhook URL."""

    def __init__(
        self,
        url: str,
        secret: str | None = None,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self._url = url
        self._secret = secret or None
        self._timeout = timeout
        self._transport = transport

    def _headers(self, payload: bytes) -> dict[str, str]:
        headers = {
            "Content-Type": "application/json",
            "User-Agent": PosFormat.USER_AGENT,
            HEADER_SOURCE: PosFormat.WEBHOOK_SOURCE,
        }
        if self._secret:
            headers[HEADER_SIGNATURE] = f"sha256={sign_payload(payload, self._secret)}"
        return headers

    async def send_order(self, order: OrderRecord, markup_table: MarkupTable, store_name: str) -> WebhookResponse:
        payload = json.dumps(build_order_payload(order, markup_table, store_name)).encode()

        try:
            async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
                response = await client.post(self._url, content=payload, headers=self._headers(payload))
        except httpx.HTTPError as exc:
            logger.warning("POS webhook delivery failed", order_id=order.id, error=str(exc))
            return WebhookResponse.fail(str(exc) or type(exc).__name__)

        if response.is_error:
            logger.warning("POS webhook rejected order", order_id=order.id, status=response.status_code)
            return WebhookResponse.fail(f"HTTP {response.status_code}: {response.reason_phrase}")

        try:
            body = response.json()
        except ValueError:
            body = {}
        if not isinstance(body, dict):
            body = {}

        logger.info("POS webhook delivered order", order_id=order.id)
        return WebhookResponse.ok(body)
