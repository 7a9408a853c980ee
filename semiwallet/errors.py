class DomainError(Exception):
    """
    Base class for every error the billing core raises on purpose.

    `status_code` is the HTTP status the error handlers map it to and
    `message` is what the caller gets to see.
    """

    status_code = 500
    message = "something went wrong"

    def __init__(self, message: str | None = None):
        if message is not None:
            self.message = message
        super().__init__(self.message)


class NotFoundError(DomainError):
    status_code = 404
    message = "not found"

    def __init__(self, entity: str = "resource", key=None):
        self.entity = entity
        self.key = key
        super().__init__(f"{entity} not found")


class PlanNotFoundError(DomainError):
    status_code = 400

    def __init__(self, code: str):
        self.code = code
        super().__init__(f"plan with code {code} not found")


class InvalidPaymentProviderError(DomainError):
    status_code = 400
    message = "invalid payment provider"


class InvalidSignatureError(DomainError):
    """Webhook signature is missing, malformed, stale or does not match."""

    status_code = 400
    message = "invalid webhook signature"


class InvalidReferenceError(DomainError):
    """Webhook payload does not carry a usable payment reference."""

    status_code = 422

    def __init__(self, reference=""):
        self.reference = reference
        super().__init__(f"invalid payment reference: {reference!r}")


class InvalidAmountError(DomainError):
    message = "cannot convert amount"


class InvalidExpirationError(DomainError):
    message = "cannot calculate expiry date for the plan"


class UnexpectedError(DomainError):
    """
    Store or provider failure. `message` describes the failed step for the
    logs, `cause` keeps the original exception. Callers only see a generic
    message.
    """

    def __init__(self, message: str, cause: Exception | None = None):
        self.cause = cause
        super().__init__(message)


class PaymentProviderError(Exception):
    """Raised by provider adapters when the provider call fails or times out."""

    def __init__(self, message: str, provider: str | None = None):
        self.provider = provider
        super().__init__(message)
