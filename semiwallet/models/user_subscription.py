from semiwallet.extensions import db
from semiwallet.utils import to_timestamp, utcnow


class UserSubscription(db.Model):
    """
    One row per user. Only a completed payment writes here, through
    subscription_service.extend_or_create.
    """

    __tablename__ = "user_subscriptions"

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, nullable=False, unique=True)
    last_plan_id = db.Column(db.Integer, db.ForeignKey("plans.id"), nullable=False)
    last_order_id = db.Column(db.Integer, db.ForeignKey("orders.id"), nullable=False)
    expires_at = db.Column(db.DateTime, nullable=False)
    created_at = db.Column(db.DateTime, default=utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    def is_active(self, now=None) -> bool:
        return self.expires_at > (now or utcnow())

    def to_dict(self):
        return {
            "plan_id": self.last_plan_id,
            "order_id": self.last_order_id,
            "expires_at": to_timestamp(self.expires_at),
            "active": self.is_active(),
        }

    def __repr__(self):
        return f"<UserSubscription user={self.user_id} expires={self.expires_at}>"
