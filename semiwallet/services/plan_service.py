import logging
from decimal import Decimal

from semiwallet.errors import NotFoundError
from semiwallet.models import Plan

logger = logging.getLogger(__name__)


DEFAULT_PLANS = [
    {"code": "1_MONTH", "name": "One Month", "price": Decimal("2.00"), "duration": 1, "duration_days": 30, "save_percentage": 0},
    {"code": "3_MONTH", "name": "3 Months", "price": Decimal("5.70"), "duration": 3, "duration_days": 90, "save_percentage": 5},
    {"code": "6_MONTH", "name": "6 Months", "price": Decimal("9.60"), "duration": 6, "duration_days": 180, "save_percentage": 10},
    {"code": "12_MONTH", "name": "12 Months", "price": Decimal("19.20"), "duration": 12, "duration_days": 360, "save_percentage": 20},
]


def get_plan_by_code(session, code: str) -> Plan:
    plan = session.query(Plan).filter_by(code=code).first()
    if plan is None:
        raise NotFoundError("plan", code)
    return plan


def get_plan_by_id(session, plan_id: int) -> Plan:
    plan = session.get(Plan, plan_id)
    if plan is None:
        raise NotFoundError("plan", plan_id)
    return plan


def list_plans(session) -> list[Plan]:
    return session.query(Plan).order_by(Plan.price.asc(), Plan.id.asc()).all()


def seed_default_plans(session) -> int:
    """
    Insert the default catalog. Existing codes are left untouched so the
    command can be re-run. Returns the number of plans created.
    """
    created = 0
    for data in DEFAULT_PLANS:
        if session.query(Plan).filter_by(code=data["code"]).first() is not None:
            continue
        session.add(Plan(**data))
        created += 1

    session.commit()
    logger.info("Plan catalog seeded", extra={"plans_created": created})
    return created
