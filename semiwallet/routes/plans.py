from flask import Blueprint

from semiwallet.extensions import db
from semiwallet.routes.response import success
from semiwallet.services import plan_service

bp = Blueprint("plans", __name__, url_prefix="/api/v1/plans")


@bp.route("", methods=["GET"])
def list_plans():
    return success([plan.to_dict() for plan in plan_service.list_plans(db.session)])
