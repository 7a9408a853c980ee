"""
Environment driven configuration.

Every value can be overridden through an environment variable; the class
defaults are safe for local development only. `ProductionConfig.validate()`
fails fast with a `ConfigurationError` when something critical is missing.
"""

import os
from datetime import timedelta
from enum import Enum
from urllib.parse import urlparse


class Environment(str, Enum):
    DEVELOPMENT = "development"
    PRODUCTION = "production"
    TESTING = "testing"


class ConfigurationError(Exception):
    """Raised when configuration validation fails"""
    pass


def _env_bool(name: str, default: str = "False") -> bool:
    return os.getenv(name, default).lower() == "true"


def _env_int(name: str, default: int) -> int:
    return int(os.getenv(name, str(default)))


class BaseConfig:
    """
    Configuration shared by all environments.
    """

    APP_NAME = os.getenv("APP_NAME", "Semi Wallet")
    ENVIRONMENT = Environment.DEVELOPMENT.value
    DEBUG = False
    TESTING = False

    SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key-change-immediately-in-production")
    FRONTEND_URL = os.getenv("FRONTEND_URL", "http://localhost:5173").rstrip("/")

    # ============================================
    # DATABASE
    # ============================================
    SQLALCHEMY_DATABASE_URI = os.getenv("DATABASE_URL", "sqlite:///semiwallet.db")
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SQLALCHEMY_ENGINE_OPTIONS = {
        "pool_pre_ping": True,
        "pool_recycle": _env_int("DATABASE_POOL_RECYCLE", 3600),
    }

    # ============================================
    # JWT (tokens are issued by the auth service)
    # ============================================
    JWT_SECRET_KEY = os.getenv("JWT_SECRET_KEY", SECRET_KEY)
    JWT_TOKEN_LOCATION = ["headers"]
    JWT_HEADER_NAME = "Authorization"
    JWT_HEADER_TYPE = "Bearer"
    JWT_ALGORITHM = "HS256"
    JWT_ACCESS_TOKEN_EXPIRES = timedelta(minutes=_env_int("JWT_ACCESS_TOKEN_MINUTES", 60))
    JWT_ERROR_MESSAGE_KEY = "message"

    # ============================================
    # PAYMENT PROVIDERS
    # ============================================
    STRIPE_SECRET_KEY = os.getenv("STRIPE_SECRET_KEY", "sk_test_xxx")
    STRIPE_WEBHOOK_SECRET = os.getenv("STRIPE_WEBHOOK_SECRET", "")
    STRIPE_API_BASE = os.getenv("STRIPE_API_BASE", "")
    STRIPE_CURRENCY = os.getenv("STRIPE_CURRENCY", "usd")
    STRIPE_TIMEOUT_SECONDS = _env_int("STRIPE_TIMEOUT_SECONDS", 30)
    STRIPE_MAX_NETWORK_RETRIES = _env_int("STRIPE_MAX_NETWORK_RETRIES", 2)
    # Stripe rejects checkout sessions that expire in less than 30 minutes
    STRIPE_CHECKOUT_EXPIRE_MINUTES = _env_int("STRIPE_CHECKOUT_EXPIRE_MINUTES", 60)

    BITPAY_ENABLED = _env_bool("BITPAY_ENABLED")

    WEBHOOK_TOLERANCE_SECONDS = _env_int("WEBHOOK_TOLERANCE_SECONDS", 300)

    # ============================================
    # BACKGROUND RECONCILIATION
    # ============================================
    REDIS_URL = os.getenv("REDIS_URL", "redis://localhost:6379/0")
    CELERY_TASK_ALWAYS_EAGER = False
    RECONCILE_INTERVAL_SECONDS = _env_int("RECONCILE_INTERVAL_SECONDS", 300)
    RECONCILE_STALE_AFTER_MINUTES = _env_int("RECONCILE_STALE_AFTER_MINUTES", 30)
    RECONCILE_BATCH_SIZE = _env_int("RECONCILE_BATCH_SIZE", 100)

    # ============================================
    # LOGGING / MONITORING
    # ============================================
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
    LOG_REQUESTS = _env_bool("LOG_REQUESTS")
    SENTRY_DSN = os.getenv("SENTRY_DSN", "")

    CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "").split(",") if o.strip()]

    @classmethod
    def validate(cls) -> None:
        """Hook for environment specific checks."""
        return None


class DevelopmentConfig(BaseConfig):
    ENVIRONMENT = Environment.DEVELOPMENT.value
    DEBUG = True
    LOG_REQUESTS = True


class TestingConfig(BaseConfig):
    ENVIRONMENT = Environment.TESTING.value
    TESTING = True
    SQLALCHEMY_DATABASE_URI = os.getenv("TEST_DATABASE_URI", "sqlite:///:memory:")
    SQLALCHEMY_ENGINE_OPTIONS = {}
    SECRET_KEY = "super-secret-test-key"
    JWT_SECRET_KEY = "super-secret-test-jwt-key-with-enough-bytes"
    STRIPE_SECRET_KEY = "sk_test_mock"
    STRIPE_WEBHOOK_SECRET = "whsec_test_secret"
    STRIPE_API_BASE = ""
    BITPAY_ENABLED = True
    CELERY_TASK_ALWAYS_EAGER = True
    LOG_LEVEL = "WARNING"
    LOG_REQUESTS = False
    SENTRY_DSN = ""


class ProductionConfig(BaseConfig):
    ENVIRONMENT = Environment.PRODUCTION.value
    DEBUG = False

    @classmethod
    def validate(cls) -> None:
        if not os.getenv("SECRET_KEY"):
            raise ConfigurationError("SECRET_KEY is required in production")

        uri = os.getenv("DATABASE_URL")
        if not uri:
            raise ConfigurationError("DATABASE_URL is required in production")
        if urlparse(uri).scheme == "sqlite":
            raise ConfigurationError("SQLite is not allowed in production. Use PostgreSQL.")

        if not cls.STRIPE_SECRET_KEY or cls.STRIPE_SECRET_KEY.startswith("sk_test"):
            raise ConfigurationError("Stripe test key detected in production!")
        if not cls.STRIPE_WEBHOOK_SECRET:
            raise ConfigurationError("STRIPE_WEBHOOK_SECRET is required in production")


config_by_name = {
    Environment.DEVELOPMENT.value: DevelopmentConfig,
    Environment.TESTING.value: TestingConfig,
    Environment.PRODUCTION.value: ProductionConfig,
}


def get_config(name: str | None = None):
    """
    Resolve the configuration class for `name`, falling back to the
    APP_ENV environment variable.
    """
    env = (name or os.getenv("APP_ENV", Environment.DEVELOPMENT.value)).lower()
    config_class = config_by_name.get(env)
    if config_class is None:
        raise ConfigurationError(f"Invalid APP_ENV value: {env}")
    config_class.validate()
    return config_class
