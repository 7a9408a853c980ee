import logging

logger = logging.getLogger(__name__)


def register_blueprints(app):
    """Register all API blueprints"""
    from semiwallet.routes import orders, payments, plans, subscriptions

    app.register_blueprint(orders.bp)
    app.register_blueprint(payments.bp)
    app.register_blueprint(plans.bp)
    app.register_blueprint(subscriptions.bp)

    @app.route("/health")
    def health():
        return {"status": "ok"}, 200

    logger.info("Registered API blueprints")
