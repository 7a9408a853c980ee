from semiwallet.errors import PaymentProviderError
from semiwallet.payments.base import InitiatedPayment, PaymentCheck, PollingProvider


class BitPayProvider(PollingProvider):
    """
    Crypto invoices. Listed so clients can offer it, but invoices cannot be
    created or checked yet.
    """

    code = "BITPAY"

    def initiate(self, amount: int, order_id: int, payment_id: int) -> InitiatedPayment:
        raise PaymentProviderError("bitpay invoices are not supported yet", provider=self.code)

    def check(self, payment) -> PaymentCheck:
        raise PaymentProviderError("bitpay invoices are not supported yet", provider=self.code)
