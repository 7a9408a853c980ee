from flask import Blueprint, request
from flask_jwt_extended import jwt_required

from semiwallet.routes.response import current_user_id, error, get_engine, success
from semiwallet.utils import MAX_ROW_ID, clamp_pagination

bp = Blueprint("orders", __name__, url_prefix="/api/v1/orders")


@bp.route("/create", methods=["POST"])
@jwt_required()
def create_order():
    """Create an order for a plan and return the checkout URL"""
    data = request.get_json(silent=True) or {}
    plan_code = data.get("plan_code")
    provider_code = data.get("payment_provider")

    if not isinstance(plan_code, str) or not plan_code.strip():
        return error("plan_code is required", 400)
    if not isinstance(provider_code, str) or not provider_code.strip():
        return error("payment_provider is required", 400)

    result = get_engine().create_order(current_user_id(), plan_code.strip(), provider_code.strip())
    return success(result.to_dict(), 201)


@bp.route("/detail", methods=["GET"])
@jwt_required()
def order_detail():
    order_id = request.args.get("id", type=int)
    if order_id is None or not 0 < order_id <= MAX_ROW_ID:
        return error("id must be a positive integer", 400)

    result = get_engine().get_order_detail(current_user_id(), order_id)
    return success(result.to_dict())


@bp.route("", methods=["GET"])
@jwt_required()
def list_orders():
    page, page_size = clamp_pagination(
        request.args.get("page", 0),
        request.args.get("page_size", 100),
    )
    orders = get_engine().list_user_orders(current_user_id(), page, page_size)
    return success({
        "orders": [order.to_dict() for order in orders],
        "page": page,
        "page_size": page_size,
    })
