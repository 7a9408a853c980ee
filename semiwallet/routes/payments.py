import logging

from flask import Blueprint, request

from semiwallet.routes.response import error, get_engine, success

logger = logging.getLogger(__name__)

bp = Blueprint("payments", __name__, url_prefix="/api/v1/payments")


@bp.route("/callback/<provider_code>", methods=["POST"])
def payment_callback(provider_code):
    """
    Provider webhook. Non-2xx answers make the provider redeliver, so only
    verified, handled (or deliberately ignored) events get a 200.
    """
    engine = get_engine()
    provider = engine.providers.get(provider_code)

    signature = request.headers.get(getattr(provider, "signature_header", "") or "")
    if not signature:
        logger.warning("Webhook without signature header", extra={"provider": provider.code})
        return error("invalid header", 400)

    # raw bytes, the signature covers the exact body
    payload = request.get_data()
    engine.handle_webhook(provider.code, signature, payload)
    return success()


@bp.route("/providers", methods=["GET"])
def list_providers():
    return success(get_engine().providers.list())
