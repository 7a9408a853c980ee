from semiwallet.errors import InvalidPaymentProviderError
from semiwallet.payments.base import PaymentProvider


class ProviderRegistry:
    """Payment providers keyed by upper-case code, in registration order."""

    def __init__(self):
        self._providers: dict[str, PaymentProvider] = {}

    def register(self, provider: PaymentProvider) -> PaymentProvider:
        self._providers[provider.code.upper()] = provider
        return provider

    def get(self, code: str | None) -> PaymentProvider:
        """Return the enabled provider for `code` or raise InvalidPaymentProviderError."""
        provider = self._providers.get((code or "").strip().upper())
        if provider is None or not provider.enabled:
            raise InvalidPaymentProviderError()
        return provider

    def list(self) -> list[dict]:
        return [{"code": p.code, "enabled": p.enabled} for p in self._providers.values()]

    def __contains__(self, code):
        return (code or "").upper() in self._providers
