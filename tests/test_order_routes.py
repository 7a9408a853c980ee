import pytest

from semiwallet.models import Order
from semiwallet.services import payment_service

pytestmark = pytest.mark.db


def create(client, headers, plan_code="1_MONTH", provider="STRIPE"):
    return client.post(
        "/api/v1/orders/create",
        json={"plan_code": plan_code, "payment_provider": provider},
        headers=headers,
    )


def test_create_order(client, auth_headers, plans, stripe_checkout):
    response = create(client, auth_headers)

    assert response.status_code == 201
    body = response.get_json()
    assert body["message"] == ""
    assert body["data"]["status"] == "CREATED"
    assert body["data"]["payment_url"].startswith("https://checkout.stripe.com/")
    assert isinstance(body["data"]["id"], int)


def test_create_order_requires_auth(client, plans):
    response = client.post("/api/v1/orders/create", json={"plan_code": "1_MONTH", "payment_provider": "STRIPE"})

    assert response.status_code == 401


@pytest.mark.parametrize("payload", [
    {},
    {"plan_code": "1_MONTH"},
    {"payment_provider": "STRIPE"},
    {"plan_code": 5, "payment_provider": "STRIPE"},
])
def test_create_order_validates_body(client, auth_headers, plans, payload):
    response = client.post("/api/v1/orders/create", json=payload, headers=auth_headers)

    assert response.status_code == 400
    assert "message" in response.get_json()


def test_create_order_unknown_plan(client, auth_headers, plans, stripe_checkout):
    response = create(client, auth_headers, plan_code="2_MONTH")

    assert response.status_code == 400
    assert "2_MONTH" in response.get_json()["message"]


def test_create_order_unknown_provider(client, auth_headers, plans):
    response = create(client, auth_headers, provider="PAYPAL")

    assert response.status_code == 400
    assert response.get_json()["message"] == "invalid payment provider"


def test_create_order_provider_down(client, auth_headers, plans, stripe_checkout, session):
    stripe_checkout.fail_next()

    response = create(client, auth_headers)

    assert response.status_code == 500
    assert response.get_json() == {"message": "internal server error"}
    assert session.query(Order).count() == 0


def test_order_detail(client, auth_headers, plans, stripe_checkout):
    order_id = create(client, auth_headers, plan_code="12_MONTH").get_json()["data"]["id"]

    response = client.get(f"/api/v1/orders/detail?id={order_id}", headers=auth_headers)

    assert response.status_code == 200
    data = response.get_json()["data"]
    assert data["id"] == order_id
    assert data["plan_code"] == "12_MONTH"
    assert data["total"] == 19.2
    assert data["status"] == "CREATED"
    assert data["payment_url"]
    assert data["payment_expire_date"] > 0


def test_order_detail_not_found(client, auth_headers, plans):
    response = client.get("/api/v1/orders/detail?id=999", headers=auth_headers)

    assert response.status_code == 404


@pytest.mark.parametrize("order_id", ["abc", "0", "-1", "99999999999999999999"])
def test_order_detail_requires_valid_id(client, auth_headers, order_id):
    response = client.get(f"/api/v1/orders/detail?id={order_id}", headers=auth_headers)

    assert response.status_code == 400


def test_order_detail_of_another_user(app, client, auth_headers, plans, stripe_checkout, user_id):
    from flask_jwt_extended import create_access_token

    order_id = create(client, auth_headers).get_json()["data"]["id"]
    other = {"Authorization": f"Bearer {create_access_token(identity=str(user_id + 1))}"}

    response = client.get(f"/api/v1/orders/detail?id={order_id}", headers=other)

    assert response.status_code == 404


def test_list_orders(client, auth_headers, plans, stripe_checkout, session, user_id):
    ids = [create(client, auth_headers).get_json()["data"]["id"] for _ in range(3)]

    response = client.get("/api/v1/orders?page=0&page_size=2", headers=auth_headers)

    data = response.get_json()["data"]
    assert response.status_code == 200
    assert data["page_size"] == 2
    assert len(data["orders"]) == 2
    assert {o["id"] for o in data["orders"]} <= set(ids)
    assert set(data["orders"][0]) == {"id", "plan_id", "total", "status", "created_at"}


def test_list_orders_clamps_paging(client, auth_headers, plans):
    response = client.get("/api/v1/orders?page=-1&page_size=1000", headers=auth_headers)

    data = response.get_json()["data"]
    assert data["page"] == 0
    assert data["page_size"] == 100
    assert data["orders"] == []


def test_subscription_view(client, auth_headers, plans, stripe_checkout, session, user_id, engine):
    assert client.get("/api/v1/subscription", headers=auth_headers).status_code == 404

    order_id = create(client, auth_headers).get_json()["data"]["id"]
    payment = payment_service.get_last_payment_by_order_id(session, order_id)
    stripe_checkout.complete(payment.external_id)
    engine.finalize(payment.id)

    response = client.get("/api/v1/subscription", headers=auth_headers)

    data = response.get_json()["data"]
    assert response.status_code == 200
    assert data["order_id"] == order_id
    assert data["plan_id"] == plans["1_MONTH"].id
    assert data["active"] is True


def test_list_plans(client, plans):
    response = client.get("/api/v1/plans")

    data = response.get_json()["data"]
    assert [p["code"] for p in data] == ["1_MONTH", "3_MONTH", "6_MONTH", "12_MONTH"]
    assert data[0]["price"] == 2.0
    assert data[3]["save_percentage"] == 20


def test_request_id_is_echoed(client):
    response = client.get("/api/v1/plans", headers={"X-Request-ID": "req-123"})

    assert response.headers["X-Request-ID"] == "req-123"


def test_unknown_route_returns_json(client):
    response = client.get("/api/v1/nope")

    assert response.status_code == 404
    assert response.get_json() == {"message": "not found"}
