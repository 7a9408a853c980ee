from enum import Enum

from semiwallet.extensions import db
from semiwallet.utils import utcnow


class PaymentStatus(str, Enum):
    CREATED = "CREATED"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"


TERMINAL_PAYMENT_STATUSES = (PaymentStatus.COMPLETED.value, PaymentStatus.FAILED.value)


class Payment(db.Model):
    __tablename__ = "payments"

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, nullable=False, index=True)
    order_id = db.Column(db.Integer, db.ForeignKey("orders.id"), nullable=False, index=True)
    amount = db.Column(db.Numeric(10, 2), nullable=False)
    status = db.Column(db.String(20), nullable=False, default=PaymentStatus.CREATED.value, index=True)
    external_id = db.Column(db.String(255), nullable=True, index=True)
    payment_provider_code = db.Column(db.String(30), nullable=False)
    payment_url = db.Column(db.Text, nullable=True)
    expires_at = db.Column(db.DateTime, nullable=True)
    # "metadata" is reserved on declarative models
    provider_metadata = db.Column("metadata", db.JSON, nullable=True)
    created_at = db.Column(db.DateTime, default=utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_PAYMENT_STATUSES

    def __repr__(self):
        return f"<Payment {self.id} {self.payment_provider_code} {self.status}>"
