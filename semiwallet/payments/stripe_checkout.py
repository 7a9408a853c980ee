# semiwallet/payments/stripe_checkout.py
import json
import logging
from dataclasses import dataclass
from datetime import timedelta
from typing import Optional

import stripe

from semiwallet.errors import InvalidReferenceError, PaymentProviderError
from semiwallet.payments.base import (
    HostedCheckoutProvider,
    InitiatedPayment,
    PaymentCheck,
    ResolvedStatus,
    WebhookEvent,
)
from semiwallet.utils import from_timestamp, to_timestamp, utcnow
from semiwallet.webhooks.security import verify_stripe_signature

logger = logging.getLogger(__name__)


RELEVANT_EVENTS = frozenset({
    "checkout.session.completed",
    "checkout.session.expired",
    "checkout.session.async_payment_succeeded",
    "checkout.session.async_payment_failed",
})

PAID_STATUSES = ("paid", "no_payment_required")

# PaymentIntent states an async payment falls back to once it has failed
FAILED_INTENT_STATUSES = ("requires_payment_method", "canceled")


@dataclass
class StripeConfig:
    api_key: str
    webhook_secret: str
    frontend_url: str
    currency: str = "usd"
    checkout_expire_minutes: int = 60
    timeout: int = 30
    max_network_retries: int = 2
    api_base: Optional[str] = None

    @classmethod
    def from_app_config(cls, config) -> "StripeConfig":
        return cls(
            api_key=config["STRIPE_SECRET_KEY"],
            webhook_secret=config["STRIPE_WEBHOOK_SECRET"],
            frontend_url=config["FRONTEND_URL"],
            currency=config.get("STRIPE_CURRENCY", "usd"),
            checkout_expire_minutes=config.get("STRIPE_CHECKOUT_EXPIRE_MINUTES", 60),
            timeout=config.get("STRIPE_TIMEOUT_SECONDS", 30),
            max_network_retries=config.get("STRIPE_MAX_NETWORK_RETRIES", 2),
            api_base=config.get("STRIPE_API_BASE") or None,
        )


def configure_stripe(config: StripeConfig) -> None:
    """Apply process wide client settings: timeout, retries and API base."""
    stripe.max_network_retries = config.max_network_retries
    stripe.default_http_client = stripe.RequestsClient(timeout=config.timeout)
    if config.api_base:
        stripe.api_base = config.api_base
    logger.info(
        "Stripe client configured",
        extra={"timeout": config.timeout, "max_network_retries": config.max_network_retries},
    )


class StripeCheckoutProvider(HostedCheckoutProvider):
    """Stripe Checkout Sessions, settled by webhook and confirmed by a session lookup."""

    code = "STRIPE"
    signature_header = "Stripe-Signature"

    def __init__(self, config: StripeConfig, enabled: bool = True):
        super().__init__(webhook_secret=config.webhook_secret, enabled=enabled)
        self.config = config

    def initiate(self, amount: int, order_id: int, payment_id: int) -> InitiatedPayment:
        expires_at = utcnow() + timedelta(minutes=self.config.checkout_expire_minutes)
        try:
            session = stripe.checkout.Session.create(
                api_key=self.config.api_key,
                mode="payment",
                client_reference_id=str(payment_id),
                line_items=[{
                    "quantity": 1,
                    "price_data": {
                        "currency": self.config.currency,
                        "unit_amount": amount,
                        "product_data": {"name": f"Order #{order_id}"},
                    },
                }],
                metadata={"order_id": str(order_id), "payment_id": str(payment_id)},
                success_url=f"{self.config.frontend_url}/orders/{order_id}?status=success",
                cancel_url=f"{self.config.frontend_url}/orders/{order_id}?status=cancel",
                expires_at=to_timestamp(expires_at),
                idempotency_key=f"payment-{payment_id}",
            )
        except stripe.StripeError as exc:
            logger.error(
                "Stripe checkout session creation failed",
                extra={"order_id": order_id, "payment_id": payment_id, "error": str(exc)},
            )
            raise PaymentProviderError(f"cannot create checkout session: {exc}", provider=self.code) from exc

        logger.info(
            "Stripe checkout session created",
            extra={"order_id": order_id, "payment_id": payment_id, "session_id": session.id},
        )
        return InitiatedPayment(
            external_id=session.id,
            checkout_url=session.url,
            expires_at=from_timestamp(getattr(session, "expires_at", None)) or expires_at,
        )

    def check(self, payment) -> PaymentCheck:
        if not payment.external_id:
            raise PaymentProviderError(f"payment {payment.id} has no checkout session", provider=self.code)

        try:
            session = stripe.checkout.Session.retrieve(
                payment.external_id,
                api_key=self.config.api_key,
                expand=["payment_intent"],
            )
        except stripe.StripeError as exc:
            logger.error(
                "Stripe checkout session lookup failed",
                extra={"payment_id": payment.id, "session_id": payment.external_id, "error": str(exc)},
            )
            raise PaymentProviderError(f"cannot retrieve checkout session: {exc}", provider=self.code) from exc

        return PaymentCheck(status=self._resolve(session), metadata=self._metadata(session))

    @staticmethod
    def _resolve(session) -> ResolvedStatus:
        if session.status == "expired":
            return ResolvedStatus.FAILED
        if session.status == "complete":
            if session.payment_status in PAID_STATUSES:
                return ResolvedStatus.COMPLETED
            # async methods (bank debits, vouchers) settle after the session completes
            if _payment_intent_status(session) in FAILED_INTENT_STATUSES:
                return ResolvedStatus.FAILED
        return ResolvedStatus.STILL_PENDING

    @staticmethod
    def _metadata(session) -> dict:
        return {
            "id": session.id,
            "status": session.status,
            "payment_status": session.payment_status,
            "payment_intent_status": _payment_intent_status(session),
            "amount_total": getattr(session, "amount_total", None),
            "currency": getattr(session, "currency", None),
        }

    def verify_webhook(self, raw_body: bytes, signature: str, tolerance: int) -> None:
        verify_stripe_signature(raw_body, signature, self.webhook_secret, tolerance=tolerance)

    def parse_webhook_event(self, raw_body: bytes) -> WebhookEvent:
        try:
            event = json.loads(raw_body)
        except (TypeError, ValueError, UnicodeDecodeError) as exc:
            raise InvalidReferenceError("malformed body") from exc
        if not isinstance(event, dict):
            raise InvalidReferenceError("malformed body")

        event_type = event.get("type") or ""
        if event_type not in RELEVANT_EVENTS:
            return WebhookEvent(event_type=event_type, client_reference=None, relevant=False)

        data = event.get("data") or {}
        obj = data.get("object") if isinstance(data, dict) else None
        reference = obj.get("client_reference_id") if isinstance(obj, dict) else None
        return WebhookEvent(event_type=event_type, client_reference=reference, relevant=True)


def _payment_intent_status(session) -> Optional[str]:
    intent = getattr(session, "payment_intent", None)
    # unexpanded intents are plain ids
    if intent is None or isinstance(intent, str):
        return None
    return getattr(intent, "status", None)
