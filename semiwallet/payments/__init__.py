from semiwallet.payments.base import (
    HostedCheckoutProvider,
    InitiatedPayment,
    PaymentCheck,
    PaymentProvider,
    PollingProvider,
    ResolvedStatus,
    WebhookEvent,
)
from semiwallet.payments.bitpay import BitPayProvider
from semiwallet.payments.registry import ProviderRegistry
from semiwallet.payments.stripe_checkout import StripeCheckoutProvider, StripeConfig, configure_stripe


def build_registry(config) -> ProviderRegistry:
    """Build the provider registry from the Flask config mapping."""
    registry = ProviderRegistry()
    registry.register(StripeCheckoutProvider(StripeConfig.from_app_config(config)))
    registry.register(BitPayProvider(enabled=bool(config.get("BITPAY_ENABLED", False))))
    return registry


__all__ = [
    "BitPayProvider",
    "HostedCheckoutProvider",
    "InitiatedPayment",
    "PaymentCheck",
    "PaymentProvider",
    "PollingProvider",
    "ProviderRegistry",
    "ResolvedStatus",
    "StripeCheckoutProvider",
    "StripeConfig",
    "WebhookEvent",
    "build_registry",
    "configure_stripe",
]
