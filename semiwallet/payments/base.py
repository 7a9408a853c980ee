"""
Payment provider contract.

The reconciliation engine only ever talks to providers through
`initiate` and `check`. Hosted checkout providers additionally know how
to read their own webhook payloads.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any, Dict, Optional

from semiwallet.errors import InvalidAmountError


class ResolvedStatus(str, Enum):
    STILL_PENDING = "STILL_PENDING"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"


@dataclass(frozen=True)
class InitiatedPayment:
    external_id: str
    checkout_url: str
    expires_at: Optional[datetime] = None


@dataclass(frozen=True)
class PaymentCheck:
    status: ResolvedStatus
    metadata: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class WebhookEvent:
    event_type: str
    client_reference: Optional[str]
    relevant: bool


class PaymentProvider(ABC):
    code: str = ""
    # digits after the decimal point in the provider's minor unit
    minor_unit_exponent: int = 2

    def __init__(self, enabled: bool = True):
        self.enabled = enabled

    def to_minor_units(self, amount) -> int:
        try:
            scaled = Decimal(str(amount)) * (10 ** self.minor_unit_exponent)
            minor = int(scaled.to_integral_value())
        except (InvalidOperation, ValueError, TypeError, OverflowError) as exc:
            raise InvalidAmountError() from exc
        if minor <= 0 or minor != scaled:
            raise InvalidAmountError()
        return minor

    @abstractmethod
    def initiate(self, amount: int, order_id: int, payment_id: int) -> InitiatedPayment:
        """Start a payment of `amount` minor units. Raises PaymentProviderError."""

    @abstractmethod
    def check(self, payment) -> PaymentCheck:
        """Ask the provider for the current state of `payment`. Raises PaymentProviderError."""

    def __repr__(self):
        return f"<{type(self).__name__} {self.code} enabled={self.enabled}>"


class HostedCheckoutProvider(PaymentProvider):
    """Redirects the user to a provider hosted page and reports back by webhook."""

    signature_header: str = ""

    def __init__(self, webhook_secret: str, enabled: bool = True):
        super().__init__(enabled=enabled)
        self.webhook_secret = webhook_secret

    @abstractmethod
    def verify_webhook(self, raw_body: bytes, signature: str, tolerance: int) -> None:
        """Authenticate a webhook delivery before its body is read. Raises InvalidSignatureError."""

    @abstractmethod
    def parse_webhook_event(self, raw_body: bytes) -> WebhookEvent:
        """Decode an already verified webhook body. Raises InvalidReferenceError."""


class PollingProvider(PaymentProvider):
    """Resolved only by polling `check`; there is no webhook."""
