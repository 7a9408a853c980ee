# semiwallet/extensions.py
"""
Flask extensions initialization module.
"""

import logging

from flask_cors import CORS
from flask_jwt_extended import JWTManager
from flask_migrate import Migrate
from flask_sqlalchemy import SQLAlchemy

# Initialize extensions
db = SQLAlchemy()
jwt = JWTManager()
cors = CORS()
migrate = Migrate()

logger = logging.getLogger(__name__)


def init_extensions(app):
    """Initialize all Flask extensions."""
    db.init_app(app)
    logger.info("SQLAlchemy initialized")

    migrate.init_app(app, db)
    logger.info("Flask-Migrate initialized")

    jwt.init_app(app)
    logger.info("JWT Manager initialized")

    init_cors(app)

    if app.config.get("ENVIRONMENT") == "development" or app.config.get("CREATE_TABLES_ON_START", False):
        create_tables(app)

    return app


def init_cors(app):
    """Initialize CORS for the public API."""
    origins = app.config.get("CORS_ORIGINS") or [app.config.get("FRONTEND_URL")]
    cors.init_app(
        app,
        resources={r"/api/*": {"origins": origins}},
        methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization", "X-Request-ID"],
        max_age=600,
    )
    logger.info("CORS initialized", extra={"origins": origins})


def create_tables(app):
    """Create database tables if they don't exist."""
    # models must be imported so their tables are registered on the metadata
    from semiwallet import models  # noqa: F401

    with app.app_context():
        db.create_all()
        logger.info("Database tables created")
