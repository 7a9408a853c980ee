"""
Subscription extension.

A user owns at most one UserSubscription row. Paying for a plan either
creates it or pushes its expiry forward, in a single
INSERT ... ON CONFLICT (user_id) DO UPDATE so concurrent completions for
the same user both land without an application side read-modify-write:

* no row yet            -> expires_at = now + duration
* row still active      -> expires_at = expires_at + duration
* row already expired   -> expires_at = now + duration
"""

import logging
from datetime import timedelta

from sqlalchemy import case, func, select
from sqlalchemy.dialects import postgresql, sqlite

from semiwallet.errors import InvalidExpirationError
from semiwallet.models import UserSubscription
from semiwallet.utils import utcnow

logger = logging.getLogger(__name__)


def _insert_for(session):
    dialect = session.get_bind().dialect.name
    if dialect == "postgresql":
        return postgresql.insert
    if dialect == "sqlite":
        return sqlite.insert
    raise NotImplementedError(f"subscription upsert is not supported on {dialect}")


def _stacked_expiry(session, duration_days: int):
    column = UserSubscription.__table__.c.expires_at
    if session.get_bind().dialect.name == "sqlite":
        return func.datetime(column, f"+{duration_days} days")
    return column + timedelta(days=duration_days)


def extend_or_create(session, user_id: int, plan_id: int, order_id: int, duration_days: int, now=None) -> UserSubscription:
    """
    Create or extend the subscription of `user_id` by `duration_days`.
    Runs inside the caller's transaction.
    """
    now = now or utcnow()
    try:
        duration_days = int(duration_days)
        if duration_days <= 0:
            raise ValueError(f"duration must be positive, got {duration_days}")
        new_expiry = now + timedelta(days=duration_days)
    except (OverflowError, ValueError, TypeError) as exc:
        raise InvalidExpirationError() from exc

    current_expiry = session.execute(
        select(UserSubscription.expires_at).where(UserSubscription.user_id == user_id)
    ).scalar_one_or_none()
    if current_expiry is not None and current_expiry > now:
        try:
            current_expiry + timedelta(days=duration_days)
        except OverflowError as exc:
            raise InvalidExpirationError() from exc

    table = UserSubscription.__table__
    insert = _insert_for(session)

    stmt = insert(table).values(
        user_id=user_id,
        last_plan_id=plan_id,
        last_order_id=order_id,
        expires_at=new_expiry,
        created_at=now,
        updated_at=now,
    )
    stmt = stmt.on_conflict_do_update(
        index_elements=[table.c.user_id],
        set_={
            "expires_at": case(
                (table.c.expires_at > now, _stacked_expiry(session, duration_days)),
                else_=stmt.excluded.expires_at,
            ),
            "last_plan_id": stmt.excluded.last_plan_id,
            "last_order_id": stmt.excluded.last_order_id,
            "updated_at": now,
        },
    )
    session.execute(stmt)

    subscription = session.execute(
        select(UserSubscription)
        .where(UserSubscription.user_id == user_id)
        .execution_options(populate_existing=True)
    ).scalar_one()

    logger.info(
        "Subscription extended",
        extra={
            "user_id": user_id,
            "plan_id": plan_id,
            "order_id": order_id,
            "expires_at": subscription.expires_at.isoformat(),
        },
    )
    return subscription


def get_user_subscription(session, user_id: int) -> UserSubscription | None:
    return session.execute(
        select(UserSubscription).where(UserSubscription.user_id == user_id)
    ).scalar_one_or_none()
