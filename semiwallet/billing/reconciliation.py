"""
Order / payment / subscription reconciliation.

This is the only place where orders and payments leave CREATED and where
subscriptions get extended:

    CREATED -> COMPLETED   (payment confirmed by the provider)
    CREATED -> FAILED      (checkout expired or payment failed)

Both outcomes are terminal. A payment is settled from a verified webhook
or from the periodic sweep, and either path goes through `finalize`,
which asks the provider for the truth instead of trusting the webhook
body and is safe to call any number of times.
"""

import logging
from dataclasses import dataclass
from datetime import timedelta

from semiwallet.billing.unit_of_work import unit_of_work
from semiwallet.errors import (
    DomainError,
    InvalidPaymentProviderError,
    InvalidReferenceError,
    NotFoundError,
    PaymentProviderError,
    PlanNotFoundError,
    UnexpectedError,
)
from semiwallet.models import TERMINAL_PAYMENT_STATUSES, OrderStatus, PaymentStatus
from semiwallet.payments.base import HostedCheckoutProvider, ResolvedStatus
from semiwallet.services import order_service, payment_service, plan_service, subscription_service
from semiwallet.utils import MAX_ROW_ID, to_timestamp, utcnow
from semiwallet.webhooks.security import ALLOWED_DRIFT_SECONDS

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CreateOrderResult:
    id: int
    status: str
    payment_url: str

    def to_dict(self):
        return {"id": self.id, "status": self.status, "payment_url": self.payment_url}


@dataclass(frozen=True)
class OrderDetailResult:
    id: int
    plan_code: str
    total: float
    status: str
    payment_url: str
    payment_expire_date: int

    def to_dict(self):
        return {
            "id": self.id,
            "plan_code": self.plan_code,
            "total": self.total,
            "status": self.status,
            "payment_url": self.payment_url,
            "payment_expire_date": self.payment_expire_date,
        }


def parse_payment_reference(reference) -> int:
    """A payment reference is the id of our Payment row."""
    if reference is None or isinstance(reference, bool):
        raise InvalidReferenceError(reference)
    try:
        payment_id = int(str(reference).strip())
    except ValueError:
        raise InvalidReferenceError(reference)
    if not 0 < payment_id <= MAX_ROW_ID:
        raise InvalidReferenceError(reference)
    return payment_id


class ReconciliationEngine:
    def __init__(self, session_factory, providers, webhook_tolerance: int = ALLOWED_DRIFT_SECONDS):
        self.session_factory = session_factory
        self.providers = providers
        self.webhook_tolerance = webhook_tolerance

    @property
    def session(self):
        return self.session_factory()

    # ------------------------------------------------------------------
    # Orders
    # ------------------------------------------------------------------

    def create_order(self, user_id: int, plan_code: str, provider_code: str) -> CreateOrderResult:
        """
        Snapshot the plan price into a new order and start its payment.
        Order and payment are committed together or not at all.
        """
        provider = self.providers.get(provider_code)
        session = self.session

        try:
            plan = plan_service.get_plan_by_code(session, plan_code)
        except NotFoundError:
            raise PlanNotFoundError(plan_code)

        try:
            with unit_of_work(session):
                order = order_service.create_order(session, user_id, plan.id, plan.price)
                payment = payment_service.create_payment(session, order, provider)
        except PaymentProviderError as exc:
            logger.error(
                "Payment initiation failed",
                extra={"user_id": user_id, "plan_code": plan_code, "provider": provider.code, "error": str(exc)},
            )
            raise UnexpectedError("cannot create payment", exc) from exc

        logger.info(
            "Order created",
            extra={"order_id": order.id, "payment_id": payment.id, "user_id": user_id, "plan_code": plan_code},
        )
        return CreateOrderResult(id=order.id, status=order.status, payment_url=payment.payment_url or "")

    def get_order_detail(self, user_id: int, order_id: int) -> OrderDetailResult:
        session = self.session
        order = order_service.get_order_by_id(session, order_id)
        if order.user_id != user_id:
            # other users' orders are indistinguishable from missing ones
            raise NotFoundError("order", order_id)

        plan = plan_service.get_plan_by_id(session, order.plan_id)

        payment_url = ""
        payment_expire_date = 0
        try:
            payment = payment_service.get_last_payment_by_order_id(session, order.id)
        except NotFoundError:
            payment = None
        if payment is not None:
            payment_expire_date = to_timestamp(payment.expires_at)
            if order.status == OrderStatus.CREATED.value:
                payment_url = payment.payment_url or ""

        return OrderDetailResult(
            id=order.id,
            plan_code=plan.code,
            total=float(order.total),
            status=order.status,
            payment_url=payment_url,
            payment_expire_date=payment_expire_date,
        )

    def list_user_orders(self, user_id: int, page: int, page_size: int):
        return order_service.list_orders_by_user(self.session, user_id, page, page_size)

    # ------------------------------------------------------------------
    # Settlement
    # ------------------------------------------------------------------

    def handle_webhook(self, provider_code: str, signature: str, raw_body: bytes) -> None:
        provider = self.providers.get(provider_code)
        if not isinstance(provider, HostedCheckoutProvider):
            raise InvalidPaymentProviderError()

        provider.verify_webhook(raw_body, signature, self.webhook_tolerance)

        event = provider.parse_webhook_event(raw_body)
        if not event.relevant:
            logger.info("Ignoring webhook event", extra={"provider": provider.code, "event_type": event.event_type})
            return

        payment_id = parse_payment_reference(event.client_reference)
        logger.info(
            "Webhook received",
            extra={"provider": provider.code, "event_type": event.event_type, "payment_id": payment_id},
        )
        self.finalize(payment_id)

    def finalize(self, payment_id: int) -> None:
        """
        Settle a payment from the provider's current answer. Already
        terminal payments and still pending checkouts are left alone.
        """
        session = self.session
        snapshot = payment_service.get_payment_snapshot(session, payment_id)
        # no connection may sit in a transaction while the provider answers
        session.rollback()
        if snapshot.status in TERMINAL_PAYMENT_STATUSES:
            logger.info("Payment already finalized", extra={"payment_id": payment_id, "status": snapshot.status})
            return

        provider = self.providers.get(snapshot.payment_provider_code)
        try:
            result = provider.check(snapshot)
        except PaymentProviderError as exc:
            logger.error(
                "Payment check failed",
                extra={"payment_id": payment_id, "provider": provider.code, "error": str(exc)},
            )
            raise UnexpectedError("cannot check payment", exc) from exc

        if result.status == ResolvedStatus.STILL_PENDING:
            with unit_of_work(session):
                payment_service.touch_pending_payment(session, payment_id)
            logger.info("Payment still pending", extra={"payment_id": payment_id})
            return

        with unit_of_work(session):
            payment = payment_service.get_payment_by_id(session, payment_id, for_update=True)
            if payment.is_terminal:
                logger.info("Payment finalized concurrently", extra={"payment_id": payment_id})
                return
            order = order_service.get_order_by_id(session, payment.order_id)

            if result.status == ResolvedStatus.COMPLETED:
                payment_service.update_payment_status_and_metadata(
                    session, payment.id, PaymentStatus.COMPLETED, result.metadata
                )
                order_service.update_order_status(session, order.id, OrderStatus.COMPLETED)
                plan = plan_service.get_plan_by_id(session, order.plan_id)
                subscription_service.extend_or_create(
                    session, order.user_id, order.plan_id, order.id, plan.duration_days
                )
            else:
                payment_service.update_payment_status_and_metadata(
                    session, payment.id, PaymentStatus.FAILED, result.metadata
                )
                order_service.update_order_status(session, order.id, OrderStatus.FAILED)

        logger.info(
            "Payment finalized",
            extra={"payment_id": payment_id, "order_id": order.id, "status": result.status.value},
        )

    def reconcile_pending_payments(self, older_than: timedelta, limit: int = 100) -> dict:
        """
        Re-run finalize for CREATED payments older than `older_than`.
        Per-payment failures are logged and counted, never raised.
        """
        session = self.session
        cutoff = utcnow() - older_than
        payment_ids = [p.id for p in payment_service.list_stale_payments(session, cutoff, limit)]

        stats = {"checked": 0, "resolved": 0, "errors": 0}
        for payment_id in payment_ids:
            stats["checked"] += 1
            try:
                self.finalize(payment_id)
            except DomainError as exc:
                stats["errors"] += 1
                logger.warning(
                    "Reconciliation failed for payment",
                    extra={"payment_id": payment_id, "error": exc.message},
                )
                continue

            if payment_service.get_payment_by_id(session, payment_id).is_terminal:
                stats["resolved"] += 1

        logger.info("Pending payments reconciled", extra=stats)
        return stats
