"""
Flask application factory.
"""

import logging

import sentry_sdk
from flask import Flask
from sentry_sdk.integrations.flask import FlaskIntegration

from semiwallet.config import get_config
from semiwallet.error_handlers import register_error_handlers
from semiwallet.extensions import db, init_extensions
from semiwallet.logging_config import setup_logging
from semiwallet.middleware.request_id import init_request_id_middleware

__version__ = "1.0.0"

logger = logging.getLogger(__name__)


def setup_sentry(app: Flask) -> None:
    """Initialize Sentry error tracking"""
    sentry_dsn = app.config.get("SENTRY_DSN")
    if not sentry_dsn:
        return

    sentry_sdk.init(
        dsn=sentry_dsn,
        integrations=[FlaskIntegration()],
        traces_sample_rate=0.1,
        environment=app.config.get("ENVIRONMENT"),
        release=__version__,
        send_default_pii=False,
    )
    logger.info("Sentry initialized")


def init_billing(app: Flask) -> None:
    """Build the payment providers and the reconciliation engine."""
    from semiwallet.billing.reconciliation import ReconciliationEngine
    from semiwallet.payments import StripeConfig, build_registry, configure_stripe

    configure_stripe(StripeConfig.from_app_config(app.config))
    registry = build_registry(app.config)

    app.extensions["reconciliation_engine"] = ReconciliationEngine(
        session_factory=lambda: db.session,
        providers=registry,
        webhook_tolerance=app.config["WEBHOOK_TOLERANCE_SECONDS"],
    )
    logger.info("Payment providers registered", extra={"providers": registry.list()})


def create_app(config_name: str | None = None) -> Flask:
    app = Flask(__name__)
    app.config.from_object(get_config(config_name))

    setup_logging(app)
    setup_sentry(app)

    init_request_id_middleware(app)
    init_extensions(app)

    # models must be registered before migrations or create_all
    from semiwallet import models  # noqa: F401

    init_billing(app)

    from semiwallet.routes import register_blueprints
    register_blueprints(app)
    register_error_handlers(app)

    from semiwallet.workers.celery_app import init_celery
    init_celery(app)

    from semiwallet.cli import register_commands
    register_commands(app)

    logger.info("Application created", extra={"environment": app.config["ENVIRONMENT"]})
    return app
