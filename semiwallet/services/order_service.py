from semiwallet.errors import NotFoundError
from semiwallet.models import Order, OrderStatus
from semiwallet.utils import utcnow


def create_order(session, user_id: int, plan_id: int, total, status: OrderStatus = OrderStatus.CREATED) -> Order:
    """
    Insert an order inside the caller's transaction. The row is flushed so
    its id is available, never committed here.
    """
    order = Order(user_id=user_id, plan_id=plan_id, total=total, status=OrderStatus(status).value)
    session.add(order)
    session.flush()
    return order


def get_order_by_id(session, order_id: int) -> Order:
    order = session.get(Order, order_id)
    if order is None:
        raise NotFoundError("order", order_id)
    return order


def update_order_status(session, order_id: int, new_status: OrderStatus) -> None:
    session.query(Order).filter(Order.id == order_id).update(
        {Order.status: OrderStatus(new_status).value, Order.updated_at: utcnow()},
        synchronize_session="fetch",
    )


def list_orders_by_user(session, user_id: int, page: int, page_size: int) -> list[Order]:
    # page and page_size are expected to be clamped already
    return (
        session.query(Order)
        .filter(Order.user_id == user_id)
        .order_by(Order.created_at.desc(), Order.id.desc())
        .offset(page * page_size)
        .limit(page_size)
        .all()
    )
