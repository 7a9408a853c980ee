from flask import Blueprint
from flask_jwt_extended import jwt_required

from semiwallet.errors import NotFoundError
from semiwallet.extensions import db
from semiwallet.routes.response import current_user_id, success
from semiwallet.services import subscription_service

bp = Blueprint("subscriptions", __name__, url_prefix="/api/v1/subscription")


@bp.route("", methods=["GET"])
@jwt_required()
def my_subscription():
    user_id = current_user_id()
    subscription = subscription_service.get_user_subscription(db.session, user_id)
    if subscription is None:
        raise NotFoundError("subscription", user_id)
    return success(subscription.to_dict())
