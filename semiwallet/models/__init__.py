from semiwallet.models.plan import Plan
from semiwallet.models.order import Order, OrderStatus
from semiwallet.models.payment import Payment, PaymentStatus, TERMINAL_PAYMENT_STATUSES
from semiwallet.models.user_subscription import UserSubscription

__all__ = [
    "Plan",
    "Order",
    "OrderStatus",
    "Payment",
    "PaymentStatus",
    "TERMINAL_PAYMENT_STATUSES",
    "UserSubscription",
]
