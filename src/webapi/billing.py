"""
Stripe Checkout for one-off report purchases.

A configured secret key enables real checkout sessions. Without one the
service runs in demo mode and purchases are granted immediately by the
payment gate.
"""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Any

import stripe

from assessment.config import ProductOffer
from assessment.errors import UpstreamError, ValidationError

logger = logging.getLogger(__name__)


class StripeBilling:
    def __init__(self, secret_key: str, webhook_secret: str = "", base_url: str = "http://localhost:3000") -> None:
        self.secret_key = secret_key
        self.webhook_secret = webhook_secret
        self.base_url = base_url.rstrip("/")

    @property
    def enabled(self) -> bool:
        return bool(self.secret_key)

    def _session_params(self, assessment_id: str, product: str, offer: ProductOffer) -> dict[str, Any]:
        return {
            "payment_method_types": ["card"],
            "line_items": [
                {
                    "price_data": {
                        "currency": offer.currency,
                        "product_data": {"name": offer.name, "description": offer.description},
                        "unit_amount": offer.amount_cents,
                    },
                    "quantity": 1,
                }
            ],
            "mode": "payment",
            "success_url": f"{self.base_url}/assessment/{assessment_id}?payment=success&type={product}",
            "cancel_url": f"{self.base_url}/assessment/{assessment_id}?payment=cancelled",
            "metadata": {"assessmentId": assessment_id, "type": product},
        }

    async def create_checkout_session(self, assessment_id: str, product: str, offer: ProductOffer) -> str:
        """Create a hosted checkout session and return its redirect URL."""
        params = self._session_params(assessment_id, product, offer)
        try:
            session = await asyncio.to_thread(
                stripe.checkout.Session.create, api_key=self.secret_key, **params,
            )
        except stripe.StripeError as exc:
            logger.error("Stripe checkout creation failed for %s: %s", assessment_id, exc)
            raise UpstreamError("Failed to create checkout session") from exc

        logger.info(
            "Created checkout session for assessment %s",
            assessment_id,
            extra={"extra_data": {"session_id": session.id, "type": product}},
        )
        return session.url

    def verify_event(self, payload: bytes, signature: str) -> dict[str, Any]:
        if not self.webhook_secret:
            raise ValidationError("Webhook secret not configured")
        text = payload.decode("utf-8", errors="replace") if isinstance(payload, bytes) else payload
        try:
            stripe.WebhookSignature.verify_header(
                text, signature, self.webhook_secret, tolerance=stripe.Webhook.DEFAULT_TOLERANCE
            )
        except stripe.SignatureVerificationError as exc:
            logger.warning("Webhook signature verification failed: %s", exc)
            raise ValidationError("Invalid webhook signature") from exc
        # The SDK's Event object is not a mapping on current releases; keep a plain dict.
        try:
            event = json.loads(text)
        except ValueError as exc:
            raise ValidationError("Invalid webhook payload") from exc
        if not isinstance(event, dict):
            raise ValidationError("Invalid webhook payload")
        return event
