from __future__ import annotations

import logging
from typing import Any

from assessment.config import AssessmentConfig
from assessment.data_models import PRODUCTS, PaymentStatus
from assessment.errors import PaymentRequiredError, ValidationError
from webapi.billing import StripeBilling
from webapi.storage import PaymentStatusStore

logger = logging.getLogger(__name__)

_FLAG_FOR_PRODUCT = {
    "full_report": "has_paid_for_full_report",
    "ebay_upgrade": "has_paid_for_ebay_upgrade",
}


def require_product(product: str | None) -> str:
    if product not in PRODUCTS:
        raise ValidationError(f"Unknown payment type: {product!r}")
    return product


class PaymentGate:
    """Per-assessment, per-product UNPAID -> PAID transitions. PAID is terminal."""

    def __init__(self, store: PaymentStatusStore, billing: StripeBilling, config: AssessmentConfig | None = None) -> None:
        self.store = store
        self.billing = billing
        self.config = config or AssessmentConfig()

    async def get_status(self, assessment_id: str) -> PaymentStatus:
        return await self.store.get(assessment_id)

    async def mark_paid(self, assessment_id: str, product: str) -> PaymentStatus:
        flag = _FLAG_FOR_PRODUCT[require_product(product)]
        status = await self.store.merge(assessment_id, **{flag: True})
        logger.info("Marked %s paid for assessment %s", product, assessment_id)
        return status

    async def create_checkout(self, assessment_id: str, product: str) -> dict[str, Any]:
        require_product(product)
        if not self.billing.enabled:
            await self.mark_paid(assessment_id, product)
            return {"success": True}
        url = await self.billing.create_checkout_session(assessment_id, product, self.config.offers[product])
        return {"url": url}

    async def require(self, assessment_id: str, product: str) -> PaymentStatus:
        status = await self.get_status(assessment_id)
        if not getattr(status, _FLAG_FOR_PRODUCT[require_product(product)]):
            raise PaymentRequiredError(f"Purchase of {product} is required")
        return status

    async def handle_webhook(self, payload: bytes, signature: str) -> str:
        event = self.billing.verify_event(payload, signature)
        event_type = event.get("type", "unknown")
        if event_type != "checkout.session.completed":
            logger.debug("Ignoring webhook event type %s", event_type)
            return f"Event type {event_type} not handled"

        session = event.get("data", {}).get("object", {})
        metadata = session.get("metadata") or {}
        assessment_id, product = metadata.get("assessmentId"), metadata.get("type")
        if session.get("payment_status") != "paid" or not assessment_id or product not in PRODUCTS:
            logger.warning("Checkout completion without payable metadata", extra={"extra_data": {"event_id": event.get("id")}})
            return "Checkout session ignored"

        await self.mark_paid(assessment_id, product)
        return f"Marked {product} paid"
