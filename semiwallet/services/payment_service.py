import logging

from sqlalchemy import select

from semiwallet.errors import NotFoundError
from semiwallet.models import Order, Payment, PaymentStatus
from semiwallet.utils import utcnow

logger = logging.getLogger(__name__)


def create_payment(session, order: Order, provider) -> Payment:
    """
    Insert a CREATED payment for `order` and initiate it with `provider`.

    The row is flushed first so the provider can be handed the payment id
    as its reference. Conversion failures raise InvalidAmountError and
    provider failures raise PaymentProviderError; in both cases the caller
    rolls back the surrounding transaction, order insert included.
    """
    payment = Payment(
        user_id=order.user_id,
        order_id=order.id,
        amount=order.total,
        status=PaymentStatus.CREATED.value,
        payment_provider_code=provider.code,
    )
    session.add(payment)
    session.flush()

    amount = provider.to_minor_units(order.total)
    initiated = provider.initiate(amount, order.id, payment.id)

    payment.external_id = initiated.external_id
    payment.payment_url = initiated.checkout_url
    payment.expires_at = initiated.expires_at
    session.flush()

    logger.info(
        "Payment initiated",
        extra={
            "payment_id": payment.id,
            "order_id": order.id,
            "provider": provider.code,
            "external_id": payment.external_id,
        },
    )
    return payment


def update_payment_status_and_metadata(session, payment_id: int, status: PaymentStatus, metadata: dict | None) -> None:
    session.query(Payment).filter(Payment.id == payment_id).update(
        {
            Payment.status: PaymentStatus(status).value,
            Payment.provider_metadata: metadata,
            Payment.updated_at: utcnow(),
        },
        synchronize_session="fetch",
    )


def get_payment_by_id(session, payment_id: int, for_update: bool = False) -> Payment:
    query = session.query(Payment).filter(Payment.id == payment_id)
    if for_update:
        # no-op on SQLite, row lock on PostgreSQL
        query = query.with_for_update().populate_existing()
    payment = query.first()
    if payment is None:
        raise NotFoundError("payment", payment_id)
    return payment


def get_payment_snapshot(session, payment_id: int):
    """
    Plain row copy of the columns a provider check needs. Unlike the ORM
    object it stays readable after the session ends its transaction.
    """
    row = session.execute(
        select(
            Payment.id,
            Payment.status,
            Payment.external_id,
            Payment.payment_provider_code,
        ).where(Payment.id == payment_id)
    ).one_or_none()
    if row is None:
        raise NotFoundError("payment", payment_id)
    return row


def touch_pending_payment(session, payment_id: int) -> None:
    """Move a still CREATED payment to the back of the reconciliation queue."""
    session.query(Payment).filter(
        Payment.id == payment_id,
        Payment.status == PaymentStatus.CREATED.value,
    ).update({Payment.updated_at: utcnow()}, synchronize_session="fetch")


def get_last_payment_by_order_id(session, order_id: int) -> Payment:
    payment = (
        session.query(Payment)
        .filter(Payment.order_id == order_id)
        .order_by(Payment.id.desc())
        .first()
    )
    if payment is None:
        raise NotFoundError("payment", order_id)
    return payment


def list_stale_payments(session, created_before, limit: int) -> list[Payment]:
    """
    CREATED payments older than `created_before`, least recently checked
    first so payments that stay pending cannot hog the batch.
    """
    return (
        session.query(Payment)
        .filter(
            Payment.status == PaymentStatus.CREATED.value,
            Payment.created_at < created_before,
        )
        .order_by(Payment.updated_at.asc(), Payment.id.asc())
        .limit(limit)
        .all()
    )
