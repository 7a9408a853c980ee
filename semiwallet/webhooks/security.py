import logging

import stripe

from semiwallet.errors import InvalidSignatureError

logger = logging.getLogger(__name__)

ALLOWED_DRIFT_SECONDS = 300  # 5 minutes


def verify_stripe_signature(
    payload: bytes,
    header: str,
    secret: str,
    tolerance: int = ALLOWED_DRIFT_SECONDS,
) -> None:
    """
    Check a `Stripe-Signature` header against the raw request body.
    Must run before the body is parsed.
    """
    if not secret:
        raise InvalidSignatureError("webhook secret not configured")

    try:
        stripe.WebhookSignature.verify_header(payload.decode("utf-8"), header, secret, tolerance=tolerance)
    except UnicodeDecodeError as exc:
        raise InvalidSignatureError() from exc
    except stripe.SignatureVerificationError as exc:
        logger.warning("Webhook signature rejected", extra={"error": str(exc)})
        raise InvalidSignatureError() from exc
