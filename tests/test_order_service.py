from datetime import timedelta

import pytest

from semiwallet.errors import NotFoundError
from semiwallet.models import Order, OrderStatus
from semiwallet.services import order_service, plan_service
from semiwallet.utils import clamp_pagination, utcnow

pytestmark = pytest.mark.db


def test_create_order_snapshots_price(session, plans, user_id):
    plan = plans["3_MONTH"]

    order = order_service.create_order(session, user_id, plan.id, plan.price)
    session.commit()

    assert order.id is not None
    assert order.status == OrderStatus.CREATED.value
    assert order.total == plan.price

    plan.price = plan.price * 2
    session.commit()
    assert order_service.get_order_by_id(session, order.id).total != plan.price


def test_create_order_does_not_commit(session, plans, user_id):
    plan = plans["1_MONTH"]

    order_service.create_order(session, user_id, plan.id, plan.price)
    session.rollback()

    assert session.query(Order).count() == 0


def test_get_missing_order(session):
    with pytest.raises(NotFoundError):
        order_service.get_order_by_id(session, 999)


def test_update_order_status_is_idempotent(session, plans, user_id):
    plan = plans["1_MONTH"]
    order = order_service.create_order(session, user_id, plan.id, plan.price)

    order_service.update_order_status(session, order.id, OrderStatus.FAILED)
    order_service.update_order_status(session, order.id, OrderStatus.FAILED)
    session.commit()

    assert order_service.get_order_by_id(session, order.id).status == "FAILED"


def test_list_orders_newest_first(session, plans, user_id):
    plan = plans["1_MONTH"]
    now = utcnow()
    for offset in range(3):
        session.add(Order(
            user_id=user_id, plan_id=plan.id, total=plan.price,
            created_at=now - timedelta(hours=offset),
        ))
    session.add(Order(user_id=user_id + 1, plan_id=plan.id, total=plan.price))
    session.commit()

    orders = order_service.list_orders_by_user(session, user_id, 0, 100)

    assert len(orders) == 3
    assert [o.created_at for o in orders] == sorted((o.created_at for o in orders), reverse=True)


def test_list_orders_pages(session, plans, user_id):
    plan = plans["1_MONTH"]
    for _ in range(5):
        order_service.create_order(session, user_id, plan.id, plan.price)
    session.commit()

    first = order_service.list_orders_by_user(session, user_id, 0, 2)
    third = order_service.list_orders_by_user(session, user_id, 2, 2)

    assert len(first) == 2
    assert len(third) == 1
    assert {o.id for o in first}.isdisjoint({o.id for o in third})


@pytest.mark.parametrize("page, page_size, expected", [
    (0, 10, (0, 10)),
    (-1, 10, (0, 10)),
    (3, 0, (3, 100)),
    (3, 1000, (3, 100)),
    (2, 100, (2, 100)),
    ("x", "y", (0, 100)),
    (None, None, (0, 100)),
])
def test_clamp_pagination(page, page_size, expected):
    assert clamp_pagination(page, page_size) == expected


def test_plan_catalog(session, plans):
    listed = plan_service.list_plans(session)

    assert [p.code for p in listed] == ["1_MONTH", "3_MONTH", "6_MONTH", "12_MONTH"]
    assert plan_service.get_plan_by_code(session, "12_MONTH").duration_days == 360
    with pytest.raises(NotFoundError):
        plan_service.get_plan_by_code(session, "2_MONTH")


def test_seed_plans_is_rerunnable(session, plans):
    assert plan_service.seed_default_plans(session) == 0
    assert len(plan_service.list_plans(session)) == 4
