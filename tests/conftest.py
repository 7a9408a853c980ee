import hashlib
import hmac
import itertools
import json
import time
from types import SimpleNamespace
from unittest.mock import patch

import pytest
import stripe
from faker import Faker
from flask_jwt_extended import create_access_token

from semiwallet import create_app
from semiwallet.extensions import db
from semiwallet.services.plan_service import seed_default_plans

# Initialize Faker for generating test data
fake = Faker()

# Custom pytest marks for organizing tests
def pytest_configure(config):
    config.addinivalue_line(
        "markers",
        "db: mark test as database-intensive"
    )
    config.addinivalue_line(
        "markers",
        "payment: mark test as payment-related"
    )


@pytest.fixture()
def app():
    """Fresh application and in-memory database per test"""
    app = create_app("testing")

    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture()
def client(app):
    return app.test_client()


@pytest.fixture()
def session(app):
    return db.session()


@pytest.fixture()
def engine(app):
    return app.extensions["reconciliation_engine"]


@pytest.fixture()
def plans(session):
    seed_default_plans(session)
    from semiwallet.models import Plan
    return {plan.code: plan for plan in session.query(Plan).all()}


@pytest.fixture()
def user_id():
    return fake.random_int(min=1, max=10_000_000)


@pytest.fixture()
def auth_headers(app, user_id):
    token = create_access_token(identity=str(user_id))
    return {"Authorization": f"Bearer {token}"}


class FakeStripeCheckout:
    """
    In-memory stand-in for the Checkout Sessions API, patched over
    stripe.checkout.Session.create / retrieve.
    """

    def __init__(self):
        self.sessions = {}
        self.created = []
        self.retrieved = []
        self._ids = itertools.count(1)
        self._next_error = None

    def fail_next(self, error=None):
        self._next_error = error or stripe.APIConnectionError("Request timed out")

    def _raise_pending_error(self):
        if self._next_error is not None:
            error, self._next_error = self._next_error, None
            raise error

    def create(self, **kwargs):
        self._raise_pending_error()
        session_id = f"cs_test_{next(self._ids)}"
        line_item = kwargs["line_items"][0]
        checkout = SimpleNamespace(
            id=session_id,
            url=f"https://checkout.stripe.com/c/pay/{session_id}",
            status="open",
            payment_status="unpaid",
            amount_total=line_item["price_data"]["unit_amount"],
            currency=line_item["price_data"]["currency"],
            expires_at=kwargs.get("expires_at"),
            client_reference_id=kwargs.get("client_reference_id"),
            payment_intent=None,
        )
        self.sessions[session_id] = checkout
        self.created.append(kwargs)
        return checkout

    def retrieve(self, session_id, **kwargs):
        self._raise_pending_error()
        self.retrieved.append(kwargs)
        try:
            return self.sessions[session_id]
        except KeyError:
            raise stripe.InvalidRequestError(f"No such checkout.session: {session_id}", "id")

    def complete(self, session_id, payment_status="paid", intent_status=None):
        checkout = self.sessions[session_id]
        checkout.status = "complete"
        checkout.payment_status = payment_status
        if intent_status is None:
            intent_status = "succeeded" if payment_status == "paid" else "processing"
        checkout.payment_intent = SimpleNamespace(id=f"pi_{session_id}", status=intent_status)

    def fail_async_payment(self, session_id):
        """The bank debit bounced: Stripe keeps the session complete but unpaid"""
        self.complete(session_id, payment_status="unpaid", intent_status="requires_payment_method")

    def expire(self, session_id):
        self.sessions[session_id].status = "expired"


@pytest.fixture()
def stripe_checkout():
    fake_checkout = FakeStripeCheckout()
    with patch("stripe.checkout.Session.create", side_effect=fake_checkout.create), \
            patch("stripe.checkout.Session.retrieve", side_effect=fake_checkout.retrieve):
        yield fake_checkout


@pytest.fixture()
def webhook_secret(app):
    return app.config["STRIPE_WEBHOOK_SECRET"]


@pytest.fixture()
def stripe_event():
    """Build the raw body of a Stripe checkout.session event"""

    def _event(event_type, client_reference_id, session_id="cs_test_1"):
        return json.dumps({
            "id": f"evt_{fake.uuid4()}",
            "type": event_type,
            "data": {
                "object": {
                    "id": session_id,
                    "object": "checkout.session",
                    "client_reference_id": client_reference_id,
                },
            },
        }).encode()

    return _event


@pytest.fixture()
def signature_header():
    """Sign a body the way Stripe does: HMAC-SHA256 over "<t>.<body>" """

    def _header(body, secret, timestamp=None):
        timestamp = int(time.time()) if timestamp is None else timestamp
        digest = hmac.new(secret.encode(), f"{timestamp}.".encode() + body, hashlib.sha256).hexdigest()
        return f"t={timestamp},v1={digest}"

    return _header


@pytest.fixture()
def sign_webhook(signature_header, webhook_secret):
    """Return (body, headers) for a signed Stripe webhook delivery"""

    def _sign(body, secret=None, timestamp=None):
        if not isinstance(body, bytes):
            body = json.dumps(body).encode()
        header = signature_header(body, secret or webhook_secret, timestamp)
        return body, {"Stripe-Signature": header, "Content-Type": "application/json"}

    return _sign
